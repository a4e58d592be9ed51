"""
Gateways towards the votes API.

Both gateways expose the same two logical fetches and never raise: the outcome is a Success with the decoded
value, or a Failure holding a FetchError (transport) or a DecodeError (payload).
VotesHttpGateway is blocking (requests) and serves the one-shot cli commands, AsyncVotesGateway (aiohttp) serves
the interactive browser.
"""
import asyncio
import logging

import aiohttp
import requests

from votemap.config import Config
from votemap.decoding import DecodeError, decode_initial_data, decode_vote_events
from votemap.remote_data import Failure, RemoteSlot, Success

logger = logging.getLogger(__name__)

JSON_HEADERS = {'Accept': 'application/json'}


class FetchError(Exception):
    def __init__(self, url: str, cause: Exception):
        super().__init__(f"fetching {url} failed: {cause}")
        self.url = url
        self.cause = cause


def _decoded(url, data, decode) -> RemoteSlot:
    try:
        return Success(decode(data))
    except DecodeError as e:
        logger.error("Could not decode response of %s: %s", url, e)
        return Failure(e)


class VotesHttpGateway:
    def __init__(self, config: Config):
        self.config = config

    def fetch_initial_data(self) -> RemoteSlot:
        return self._fetch(self.config.initial_data_url(), decode_initial_data)

    def fetch_vote_events(self, vote_id: int) -> RemoteSlot:
        return self._fetch(self.config.vote_events_url(vote_id), decode_vote_events)

    def _fetch(self, url, decode) -> RemoteSlot:
        logger.info("Fetching %s", url)
        try:
            response = requests.get(url, headers=JSON_HEADERS, timeout=self.config.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("HTTP error for %s: %s", url, e)
            return Failure(FetchError(url, e))

        try:
            data = response.json()
        except ValueError as e:
            return Failure(DecodeError(f"response of {url} is not json: {e}"))

        return _decoded(url, data, decode)


def create_session(config: Config) -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(limit=config.max_concurrent_requests),
        timeout=aiohttp.ClientTimeout(total=config.timeout_seconds),
        headers=JSON_HEADERS,
    )


class AsyncVotesGateway:
    def __init__(self, config: Config, session: aiohttp.ClientSession):
        self.config = config
        self.session = session

    async def fetch_initial_data(self) -> RemoteSlot:
        return await self._fetch(self.config.initial_data_url(), decode_initial_data)

    async def fetch_vote_events(self, vote_id: int) -> RemoteSlot:
        return await self._fetch(self.config.vote_events_url(vote_id), decode_vote_events)

    async def _fetch(self, url, decode) -> RemoteSlot:
        logger.info("Fetching %s", url)
        try:
            async with self.session.get(url) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("HTTP error for %s: %s", url, e)
            return Failure(FetchError(url, e))
        except ValueError as e:
            return Failure(DecodeError(f"response of {url} is not json: {e}"))

        return _decoded(url, data, decode)
