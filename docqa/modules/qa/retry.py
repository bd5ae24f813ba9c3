"""Timeout race and retry policy for retrieval QA calls."""
import asyncio
import logging

from langchain_core.runnables import Runnable

logger = logging.getLogger(__name__)


class AnswerTimeoutError(Exception):
    """Raised when a bounded retry policy runs out of attempts."""

    def __init__(self, query: str, attempts: int):
        self.query = query
        self.attempts = attempts
        super().__init__(f'No answer to "{query}" after {attempts} timed-out attempt(s)')


async def ask_with_timeout(chain: Runnable, query: str, timeout: float) -> str:
    """Race one chain call against timeout. The call is cancelled if it loses."""
    return await asyncio.wait_for(chain.ainvoke(query), timeout=timeout)


async def ask_until_answered(
    chain: Runnable,
    query: str,
    timeout: float,
    max_attempts: int = 0,
    backoff: float = 0.0,
    backoff_max: float = 60.0,
) -> str:
    """Ask the same query from scratch until one attempt beats the timeout.

    max_attempts == 0 means no limit: the caller does not get control back
    until an answer arrives. Only timeouts are retried; any other error from
    the chain propagates.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await ask_with_timeout(chain, query, timeout)
        except asyncio.TimeoutError:
            if max_attempts and attempt >= max_attempts:
                logger.error(f'Giving up on "{query}" after {attempt} attempt(s) of {timeout:g}s')
                raise AnswerTimeoutError(query, attempt)
            logger.warning(f'No answer to "{query}" within {timeout:g} seconds (attempt {attempt}). Retrying...')
        if backoff > 0:
            await asyncio.sleep(min(backoff * 2 ** (attempt - 1), backoff_max))
