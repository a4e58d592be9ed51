import colorsys
from typing import Optional

from votemap.model import VoteEvent

WHITE = "#ffffff"
BLACK = "#000000"
FALLBACK_COLOUR = "#888888"

# increase of HSL lightness for the selected person
LIGHTEN_AMOUNT = 0.2

PARTY_COLOURS = {
    "conservative": "#0087dc",
    "labour": "#dc241f",
    "labour/co-operative": "#dc241f",
    "liberal democrat": "#faa61a",
    "scottish national party": "#fdf38e",
    "snp": "#fdf38e",
    "plaid cymru": "#008142",
    "green": "#6ab023",
    "dup": "#d46a4c",
    "democratic unionist party": "#d46a4c",
    "uup": "#48a5ee",
    "sinn fein": "#326760",
    "sinn féin": "#326760",
    "sdlp": "#2aa82c",
    "social democratic and labour party": "#2aa82c",
    "alliance": "#f6cb2f",
    "ukip": "#70147a",
    "reform uk": "#12b6cf",
    "respect": "#46801c",
    "independent": "#dddddd",
    "speaker": BLACK,
    "deputy speaker": BLACK,
}


def party_colour(event: VoteEvent) -> str:
    return PARTY_COLOURS.get(event.party.lower(), FALLBACK_COLOUR)


def display_colour(event: VoteEvent, selected_person_id: Optional[int]) -> str:
    colour = party_colour(event)
    if event.person_id == selected_person_id:
        return lighten(colour, LIGHTEN_AMOUNT)
    return colour


def border_colour(event: VoteEvent, selected_person_id: Optional[int]) -> Optional[str]:
    """
    Only the selected person gets a border. Speakers are drawn in black, so their border is white.
    """
    if event.person_id != selected_person_id:
        return None
    return WHITE if event.is_speaker else BLACK


def lighten(colour: str, amount: float) -> str:
    r, g, b = (int(colour[i:i + 2], 16) / 255 for i in (1, 3, 5))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    r, g, b = colorsys.hls_to_rgb(h, min(1.0, l + amount), s)
    return "#%02x%02x%02x" % (round(r * 255), round(g * 255), round(b * 255))
