import asyncio
import logging
from typing import Callable, Dict, Optional

from votemap.chart import chart_payload_to_json
from votemap.controller import (
    FetchInitialData,
    FetchVoteEvents,
    InitialDataReceived,
    Model,
    RenderChart,
    VoteEventsReceived,
    init,
    update,
)
from votemap.infra.api import FetchError
from votemap.remote_data import Failure

logger = logging.getLogger(__name__)


class VoteBrowser:
    """
    Runs the controller: one event at a time, taken from a queue.
    Fetches run as tasks in the background and put their result on the same queue when they complete, so a
    response is handled like any other event, whatever the order in which responses come back.
    """

    def __init__(self, gateway, render: Callable[[Dict], None]):
        self.gateway = gateway
        self.render = render
        self.model: Optional[Model] = None
        self.events: asyncio.Queue = asyncio.Queue()
        self._fetches = set()

    def dispatch(self, event) -> None:
        self.events.put_nowait(event)

    def stop(self) -> None:
        self.events.put_nowait(None)

    def start(self) -> None:
        """ Starts loading the initial data. Needs a running event loop. """
        self.model, commands = init()
        self._perform(commands)

    async def run(self) -> None:
        """ Handles events until stop() is called. """
        if self.model is None:
            self.start()

        while True:
            event = await self.events.get()
            try:
                if event is None:
                    break
                self.handle(event)
            finally:
                self.events.task_done()

    def handle(self, event) -> None:
        logger.debug("Handling %s", event)
        self.model, commands = update(self.model, event)
        self._perform(commands)

    async def wait_until_idle(self) -> None:
        """ Waits until no fetch is running and every event has been handled. """
        while True:
            running = [task for task in self._fetches if not task.done()]
            if running:
                await asyncio.gather(*running)
            await self.events.join()
            # a fetch finishing during join() leaves its response on the queue
            if self.events.empty() and all(task.done() for task in self._fetches):
                return

    def _perform(self, commands) -> None:
        for command in commands:
            if isinstance(command, FetchInitialData):
                self._start_fetch(self._fetch_initial_data())
            elif isinstance(command, FetchVoteEvents):
                self._start_fetch(self._fetch_vote_events(command.vote_id))
            elif isinstance(command, RenderChart):
                self.render(chart_payload_to_json(command.payload))
            else:
                raise TypeError(f"unknown command: {command!r}")

    def _start_fetch(self, coroutine) -> None:
        task = asyncio.get_running_loop().create_task(coroutine)
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def _fetch_initial_data(self) -> None:
        try:
            result = await self.gateway.fetch_initial_data()
        except Exception as e:
            logger.exception("Fetching the initial data failed")
            result = Failure(FetchError("initial-data", e))
        self.dispatch(InitialDataReceived(result))

    async def _fetch_vote_events(self, vote_id: int) -> None:
        try:
            result = await self.gateway.fetch_vote_events(vote_id)
        except Exception as e:
            logger.exception("Fetching vote events for %s failed", vote_id)
            result = Failure(FetchError(f"vote-events/{vote_id}", e))
        self.dispatch(VoteEventsReceived(vote_id, result))
