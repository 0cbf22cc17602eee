#!/usr/bin/env python3
"""
YouTube Subscription Sync

This tool copies YouTube channel subscriptions from one account to another.
It drives two browser logins one after the other:
1. Log in to the source account and collect all of its subscriptions
2. Log in to the destination account and subscribe it to the same channels

Nothing is written to disk except the OAuth client configuration; access
tokens and the collected subscription list only live in memory.

Requirements:
- Google Cloud Project with YouTube Data API v3 enabled
- OAuth2 client id/secret whose redirect URI points at the local callback
- Two YouTube accounts for source and destination
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
import threading
import webbrowser
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple
from urllib.parse import urlparse

import aiohttp
from aiohttp import web
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

# Configuration
CONFIG_FILE = 'config.json'
LOG_FILE = 'youtube_sync.log'

# Subscriptions are listed in pages of this size (API maximum)
PAGE_SIZE = 50

DEFAULT_CONFIG = {
    'port': 8080,
    'redirect_url': 'http://localhost:8080/callback',
    'scope': 'https://www.googleapis.com/auth/youtube.force-ssl',
    'authorization_url': 'https://accounts.google.com/o/oauth2/v2/auth',
    'token_url': 'https://oauth2.googleapis.com/token',
    'api_base_url': 'https://youtube.googleapis.com/youtube/v3',
}

# camelCase keys written by the Node version of this tool
LEGACY_CONFIG_KEYS = {
    'clientId': 'client_id',
    'clientSecret': 'client_secret',
    'redirectUrl': 'redirect_url',
    'authorizationUrl': 'authorization_url',
    'tokenUrl': 'token_url',
}

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Log to both the terminal and LOG_FILE."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE),
            logging.StreamHandler()
        ]
    )
    logging.getLogger('aiohttp.access').setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the OAuth client configuration cannot be used."""


@dataclass(frozen=True)
class OAuthConfig:
    """OAuth client settings, fixed for the lifetime of the process."""

    client_id: str
    client_secret: str
    port: int = DEFAULT_CONFIG['port']
    redirect_url: str = DEFAULT_CONFIG['redirect_url']
    scope: str = DEFAULT_CONFIG['scope']
    authorization_url: str = DEFAULT_CONFIG['authorization_url']
    token_url: str = DEFAULT_CONFIG['token_url']
    api_base_url: str = DEFAULT_CONFIG['api_base_url']

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OAuthConfig':
        data = {LEGACY_CONFIG_KEYS.get(key, key): value for key, value in data.items()}
        if not data.get('client_id') or not data.get('client_secret'):
            raise ConfigError("Configuration must contain client_id and client_secret")
        merged = {**DEFAULT_CONFIG, **data}
        try:
            return cls(
                client_id=merged['client_id'],
                client_secret=merged['client_secret'],
                port=int(merged['port']),
                redirect_url=merged['redirect_url'],
                scope=merged['scope'],
                authorization_url=merged['authorization_url'],
                token_url=merged['token_url'],
                api_base_url=merged['api_base_url'].rstrip('/'),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def callback_path(self) -> str:
        return urlparse(self.redirect_url).path or '/'

    @property
    def listen_host(self) -> str:
        return urlparse(self.redirect_url).hostname or 'localhost'

    @property
    def subscriptions_url(self) -> str:
        return f"{self.api_base_url}/subscriptions"

    def client_config(self) -> Dict[str, Dict[str, Any]]:
        """Client secrets in the layout google_auth_oauthlib expects."""
        return {
            'installed': {
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'auth_uri': self.authorization_url,
                'token_uri': self.token_url,
                'redirect_uris': [self.redirect_url],
            }
        }


def read_client_secrets(filename: str) -> Dict[str, str]:
    """
    Read client id and secret from a client secrets file downloaded from
    the Google Cloud Console.

    Args:
        filename: Path to the client secrets JSON file

    Returns:
        Dict: client_id and client_secret
    """
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read client secrets {filename}: {e}") from e

    block = data.get('installed') or data.get('web')
    if not block:
        raise ConfigError(f"{filename} is not a client secrets file for a web or installed app")
    return {
        'client_id': block.get('client_id', ''),
        'client_secret': block.get('client_secret', ''),
    }


def prompt_credentials() -> Dict[str, str]:
    """Ask the user for the OAuth client id and secret."""
    client_id = input("YouTube OAuth Client ID: ").strip()
    client_secret = getpass.getpass("YouTube OAuth Client Secret: ").strip()
    return {'client_id': client_id, 'client_secret': client_secret}


def load_or_create_config(filename: str = CONFIG_FILE,
                          client_secrets: Optional[str] = None,
                          prompt: Callable[[], Dict[str, str]] = prompt_credentials) -> OAuthConfig:
    """
    Load the OAuth configuration, creating it on first run.

    Args:
        filename: Path of the configuration file
        client_secrets: Optional Google client secrets file used instead of prompting
        prompt: Callable asking the user for client id/secret

    Returns:
        OAuthConfig: The loaded configuration
    """
    if os.path.exists(filename):
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to read {filename}: {e}") from e
        logger.debug(f"Loaded configuration from {filename}")
        return OAuthConfig.from_dict(data)

    credentials = read_client_secrets(client_secrets) if client_secrets else prompt()
    config = OAuthConfig.from_dict(credentials)

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=4)
    logger.info(f"Saved configuration to {filename}")
    return config


def build_authorization_url(config: OAuthConfig) -> Tuple[str, str]:
    """
    Build a login URL with a freshly generated anti-forgery state.

    Returns:
        Tuple: (authorization URL, state)
    """
    flow = Flow.from_client_config(
        config.client_config(),
        scopes=config.scope.split(),
        redirect_uri=config.redirect_url,
        autogenerate_code_verifier=False,
    )
    return flow.authorization_url(access_type='online', prompt='select_account')


# ---------------------------------------------------------------------------
# YouTube Data API
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Subscription:
    """A followed channel: its display title and resource reference."""

    title: str
    kind: str
    channel_id: str

    @property
    def resource_id(self) -> Dict[str, str]:
        return {'kind': self.kind, 'channelId': self.channel_id}

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Subscription':
        snippet = item['snippet']
        resource = snippet['resourceId']
        if not isinstance(resource, dict):
            raise TypeError(f"resourceId is not an object: {resource!r}")
        return cls(
            title=snippet.get('title', ''),
            kind=resource.get('kind', 'youtube#channel'),
            channel_id=resource['channelId'],
        )


def _is_success(response: aiohttp.ClientResponse) -> bool:
    return 200 <= response.status < 300


async def _read_payload(response: aiohttp.ClientResponse) -> Any:
    """Return the response body as JSON when possible, text otherwise."""
    try:
        return await response.json(content_type=None)
    except ValueError:
        return await response.text(errors='replace')


class YouTubeClient:
    """Talks to the OAuth token endpoint and the subscriptions endpoint."""

    def __init__(self, session: aiohttp.ClientSession, config: OAuthConfig):
        self.session = session
        self.config = config

    @staticmethod
    def _auth_headers(access_token: str) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        Credentials(token=access_token).apply(headers)
        return headers

    async def exchange_code(self, code: str) -> Optional[str]:
        """
        Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the OAuth redirect

        Returns:
            str: Access token, or None if the exchange failed
        """
        params = {
            'client_id': self.config.client_id,
            'client_secret': self.config.client_secret,
            'redirect_uri': self.config.redirect_url,
            'grant_type': 'authorization_code',
            'code': code,
        }
        try:
            async with self.session.post(self.config.token_url, params=params) as response:
                payload = await _read_payload(response)
                if not _is_success(response):
                    logger.error(f"Failed to login using YouTube: {payload} ({response.status})")
                    return None
        except aiohttp.ClientError as e:
            logger.error(f"Failed to login using YouTube: {e}")
            return None

        access_token = payload.get('access_token') if isinstance(payload, dict) else None
        if not access_token:
            logger.error(f"Failed to login using YouTube: Response did not contain an access_token {payload}")
            return None
        return access_token

    async def extract_subscriptions(self, access_token: str) -> List[Subscription]:
        """
        Collect every subscription of the authenticated account.

        Pages are fetched one after another. If a page fails, whatever was
        collected up to that point is returned.

        Args:
            access_token: Bearer token of the source account

        Returns:
            List[Subscription]: Subscriptions in the order they were listed
        """
        subscriptions: List[Subscription] = []
        seen_tokens: Set[str] = set()
        next_page_token: Optional[str] = None
        headers = self._auth_headers(access_token)

        while True:
            params = {'part': 'id,snippet', 'maxResults': str(PAGE_SIZE), 'mine': 'true'}
            if next_page_token:
                params['pageToken'] = next_page_token

            try:
                async with self.session.get(self.config.subscriptions_url,
                                            params=params, headers=headers) as response:
                    payload = await _read_payload(response)
                    if not _is_success(response):
                        logger.error(f"Failed to load subscriptions: {payload} ({response.status})")
                        return subscriptions
            except aiohttp.ClientError as e:
                logger.error(f"Failed to load subscriptions: {e}")
                return subscriptions

            if not isinstance(payload, dict):
                logger.error(f"Failed to load subscriptions: unexpected response {payload!r}")
                return subscriptions

            items = payload.get('items') or []
            for item in items:
                try:
                    subscriptions.append(Subscription.from_item(item))
                except (KeyError, TypeError, AttributeError):
                    logger.warning(f"Skipping malformed subscription item: {item}")

            logger.debug(f"Collected {len(items)} subscriptions (Total: {len(subscriptions)})")

            next_page_token = payload.get('nextPageToken')
            if not next_page_token:
                break
            if next_page_token in seen_tokens:
                logger.error(f"Page token {next_page_token} was returned twice, stopping")
                break
            seen_tokens.add(next_page_token)

        return subscriptions

    async def subscribe_to_channel(self, access_token: str, subscription: Subscription) -> bool:
        """
        Subscribe the authenticated account to one channel.

        Returns:
            bool: True if the API answered with a 2xx status
        """
        body = {'snippet': {'resourceId': subscription.resource_id}}
        try:
            async with self.session.post(self.config.subscriptions_url,
                                         params={'part': 'snippet'},
                                         headers=self._auth_headers(access_token),
                                         json=body) as response:
                ok = _is_success(response)
                if not ok:
                    logger.debug(f"Subscribe to {subscription.channel_id} returned "
                                 f"{response.status}: {await _read_payload(response)}")
        except Exception as e:
            logger.debug(f"Subscribe to {subscription.channel_id} failed: {e!r}")
            ok = False

        if ok:
            logger.info(f"Subscribed to {subscription.title}")
        else:
            logger.warning(f"Failed to subscribe to {subscription.title}")
        return ok

    async def import_subscriptions(self, access_token: str,
                                   subscriptions: List[Subscription]) -> Dict[str, int]:
        """
        Subscribe to all channels at once and wait until every request settled.

        Args:
            access_token: Bearer token of the destination account
            subscriptions: Subscriptions to recreate

        Returns:
            Dict: Statistics about the import
        """
        results = await asyncio.gather(*(
            self.subscribe_to_channel(access_token, subscription)
            for subscription in subscriptions
        ), return_exceptions=True)
        successful = sum(1 for ok in results if ok is True)
        stats = {
            'total': len(results),
            'successful': successful,
            'failed': len(results) - successful,
        }
        logger.info(f"Results: {stats['successful']} successful, {stats['failed']} failed")
        return stats


# ---------------------------------------------------------------------------
# Session state machine
# ---------------------------------------------------------------------------

class SessionPhase(Enum):
    AWAITING_SOURCE = 'awaiting_source'
    AWAITING_DESTINATION = 'awaiting_destination'
    FINISHED = 'finished'


class Event(Enum):
    SOURCE_CONFIRMED = 'source_confirmed'
    DESTINATION_CONFIRMED = 'destination_confirmed'
    DECLINED = 'declined'
    TOKEN_ISSUED = 'token_issued'
    SOURCE_COLLECTED = 'source_collected'
    SOURCE_EMPTY = 'source_empty'
    REPLICATION_SETTLED = 'replication_settled'
    FAILED = 'failed'


class Action(Enum):
    NONE = 'none'
    OPEN_LOGIN = 'open_login'
    COLLECT = 'collect'
    CONFIRM_DESTINATION = 'confirm_destination'
    REPLICATE = 'replicate'
    EXIT = 'exit'


@dataclass(frozen=True)
class Transition:
    phase: SessionPhase
    action: Action = Action.NONE
    exit_code: Optional[int] = None


_TRANSITIONS = {
    (SessionPhase.AWAITING_SOURCE, Event.SOURCE_CONFIRMED):
        Transition(SessionPhase.AWAITING_SOURCE, Action.OPEN_LOGIN),
    (SessionPhase.AWAITING_SOURCE, Event.TOKEN_ISSUED):
        Transition(SessionPhase.AWAITING_SOURCE, Action.COLLECT),
    (SessionPhase.AWAITING_SOURCE, Event.SOURCE_EMPTY):
        Transition(SessionPhase.FINISHED, Action.EXIT, exit_code=1),
    (SessionPhase.AWAITING_SOURCE, Event.SOURCE_COLLECTED):
        Transition(SessionPhase.AWAITING_SOURCE, Action.CONFIRM_DESTINATION),
    (SessionPhase.AWAITING_SOURCE, Event.DESTINATION_CONFIRMED):
        Transition(SessionPhase.AWAITING_DESTINATION, Action.OPEN_LOGIN),
    (SessionPhase.AWAITING_DESTINATION, Event.TOKEN_ISSUED):
        Transition(SessionPhase.AWAITING_DESTINATION, Action.REPLICATE),
    (SessionPhase.AWAITING_DESTINATION, Event.REPLICATION_SETTLED):
        Transition(SessionPhase.FINISHED, Action.EXIT, exit_code=0),
}


def transition(phase: SessionPhase, event: Event) -> Transition:
    """
    Compute the next phase and the action to run for an event.

    Declining a prompt finishes with status 0 and a failure with status 1
    from any live phase. Pairs without a rule leave the phase unchanged.
    """
    if phase is SessionPhase.FINISHED:
        return Transition(phase)
    if event is Event.DECLINED:
        return Transition(SessionPhase.FINISHED, Action.EXIT, exit_code=0)
    if event is Event.FAILED:
        return Transition(SessionPhase.FINISHED, Action.EXIT, exit_code=1)
    return _TRANSITIONS.get((phase, event), Transition(phase))


class CallbackResult(Enum):
    ACCEPTED = 'Please check the terminal for the next steps. You can close this window now.'
    MISSING_CODE = 'Failed to login with YouTube. Please try again.'
    INVALID_STATE = 'Failed to login with YouTube. Invalid state.'
    NO_TOKEN = 'Failed to login with YouTube. No access token received.'
    IGNORED = 'Please continue in your terminal'

    @property
    def message(self) -> str:
        return self.value


async def confirm(message: str) -> bool:
    """Ask a yes/no question on the terminal; Enter means yes."""
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _resolve(answer: Optional[str], error: Optional[BaseException]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(answer)

    def _read() -> None:
        try:
            answer = input(f"{message} (Y/n): ")
        except (EOFError, OSError) as e:
            loop.call_soon_threadsafe(_resolve, None, e)
            return
        loop.call_soon_threadsafe(_resolve, answer, None)

    # daemon, so Ctrl-C does not wait for a pending input()
    threading.Thread(target=_read, name='confirm-prompt', daemon=True).start()
    try:
        answer = await future
    except EOFError:
        return False
    return answer.strip().lower() in ('', 'y', 'yes')


def open_in_browser(url: str) -> None:
    print(f"\nIf your browser does not open, visit this URL:\n{url}\n")
    webbrowser.open(url)


class SubscriptionSyncOrchestrator:
    """
    Owns the session phase and the anti-forgery state, and runs the work
    each phase needs.

    Callbacks are fed in through authenticate()/advance(); the process
    exit code is available from wait() once the phase is FINISHED.
    """

    def __init__(self, client: YouTubeClient, config: OAuthConfig,
                 prompt: Callable[[str], Awaitable[bool]] = confirm,
                 open_url: Callable[[str], Any] = open_in_browser,
                 url_builder: Callable[[OAuthConfig], Tuple[str, str]] = build_authorization_url):
        self.client = client
        self.config = config
        self.prompt = prompt
        self.open_url = open_url
        self.url_builder = url_builder

        self.phase = SessionPhase.AWAITING_SOURCE
        self.state_token: Optional[str] = None
        self.subscriptions: Tuple[Subscription, ...] = ()
        self.exit_code: Optional[int] = None
        self._finished = asyncio.Event()

    @property
    def finished(self) -> bool:
        return self.phase is SessionPhase.FINISHED

    async def start(self) -> None:
        """Ask to log in to the source account and open its login page."""
        accepted = await self.prompt(
            "Press enter to login to your source YouTube account from where "
            "subscriptions will be taken from")
        await self._drive(Event.SOURCE_CONFIRMED if accepted else Event.DECLINED)

    async def wait(self) -> int:
        await self._finished.wait()
        return self.exit_code

    def fail(self) -> None:
        """Give up on the sync after an unexpected error."""
        step = transition(self.phase, Event.FAILED)
        self.phase = step.phase
        if step.action is Action.EXIT:
            self._finish(step.exit_code)

    def _finish(self, exit_code: int) -> None:
        self.state_token = None
        self.exit_code = exit_code
        self._finished.set()

    async def authenticate(self, code: Any, state: Optional[str],
                           error: Optional[str] = None) -> Tuple[CallbackResult, Optional[str]]:
        """
        Validate a login redirect and exchange its code for a token.

        Returns:
            Tuple: (result, access token or None)
        """
        if self.finished:
            return CallbackResult.IGNORED, None
        if error:
            logger.error(f"Login was not completed: {error}")
            return CallbackResult.MISSING_CODE, None
        if not code or not isinstance(code, str):
            logger.error("Login redirect did not contain an authorization code")
            return CallbackResult.MISSING_CODE, None
        if not state or state != self.state_token:
            logger.error("Login redirect carried an invalid state")
            return CallbackResult.INVALID_STATE, None

        access_token = await self.client.exchange_code(code)
        if not access_token:
            return CallbackResult.NO_TOKEN, None

        # a second redirect for the same login (or a newer login) won the race
        if state != self.state_token:
            return CallbackResult.INVALID_STATE, None
        self.state_token = None
        return CallbackResult.ACCEPTED, access_token

    async def advance(self, access_token: str) -> None:
        """Run the work of the current phase for an accepted token."""
        await self._drive(Event.TOKEN_ISSUED, access_token)

    async def handle_callback(self, code: Any, state: Optional[str],
                              error: Optional[str] = None) -> CallbackResult:
        result, access_token = await self.authenticate(code, state, error)
        if access_token:
            await self.advance(access_token)
        return result

    async def _drive(self, event: Optional[Event], access_token: Optional[str] = None) -> None:
        while event is not None:
            step = transition(self.phase, event)
            if step.phase is not self.phase:
                logger.debug(f"{self.phase.name} -> {step.phase.name} on {event.name}")
            self.phase = step.phase
            event = await self._perform(step, access_token)

    async def _perform(self, step: Transition, access_token: Optional[str]) -> Optional[Event]:
        if step.action is Action.OPEN_LOGIN:
            url, self.state_token = self.url_builder(self.config)
            self.open_url(url)
            return None

        if step.action is Action.COLLECT:
            logger.info("Successfully logged in to source account.")
            logger.info("Collecting subscribed channels ...")
            self.subscriptions = tuple(await self.client.extract_subscriptions(access_token))
            if not self.subscriptions:
                logger.error("No subscriptions found! Please try again with an account "
                             "that is subscribed to other channels.")
                return Event.SOURCE_EMPTY
            logger.info(f"Found {len(self.subscriptions)} subscriptions.")
            return Event.SOURCE_COLLECTED

        if step.action is Action.CONFIRM_DESTINATION:
            accepted = await self.prompt(
                "Press enter to login to your destination YouTube account which will "
                f"automatically subscribe to {len(self.subscriptions)} channels.")
            return Event.DESTINATION_CONFIRMED if accepted else Event.DECLINED

        if step.action is Action.REPLICATE:
            logger.info("Successfully logged in to destination account.")
            logger.info(f"Subscribing to {len(self.subscriptions)} channels ...")
            await self.client.import_subscriptions(access_token, list(self.subscriptions))
            logger.info("Done!")
            return Event.REPLICATION_SETTLED

        if step.action is Action.EXIT:
            self._finish(step.exit_code)
        return None


# ---------------------------------------------------------------------------
# Local callback receiver
# ---------------------------------------------------------------------------

class CallbackServer:
    """Serves the OAuth redirect URI and the root page on localhost."""

    def __init__(self, orchestrator: SubscriptionSyncOrchestrator, config: OAuthConfig):
        self.orchestrator = orchestrator
        self.config = config
        self.app = web.Application()
        self.app.router.add_get(config.callback_path, self._handle_callback)
        if config.callback_path != '/':
            self.app.router.add_get('/', self._handle_root)
        self._runner: Optional[web.AppRunner] = None
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.config.listen_host, self.config.port)
        await site.start()
        logger.debug(f"Callback server listening on {self.config.listen_host}:{self.config.port}")

    async def stop(self) -> None:
        """Wait for running phase work, then shut the listener down."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    async def _handle_root(self, request: web.Request) -> web.Response:
        return web.Response(text=CallbackResult.IGNORED.message)

    async def _handle_callback(self, request: web.Request) -> web.Response:
        codes = request.query.getall('code', [])
        code = codes[0] if len(codes) == 1 else None
        result, access_token = await self.orchestrator.authenticate(
            code, request.query.get('state'), request.query.get('error'))

        if access_token:
            task = asyncio.ensure_future(self.orchestrator.advance(access_token))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

        status = 400 if result in (CallbackResult.MISSING_CODE,
                                   CallbackResult.INVALID_STATE,
                                   CallbackResult.NO_TOKEN) else 200
        return web.Response(text=result.message, status=status)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unexpected error while processing login", exc_info=exc)
            self.orchestrator.fail()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def run(config: OAuthConfig, open_url: Callable[[str], Any] = open_in_browser) -> int:
    """Run both logins against a live callback server and return the exit code."""
    async with aiohttp.ClientSession() as session:
        orchestrator = SubscriptionSyncOrchestrator(YouTubeClient(session, config), config,
                                                    open_url=open_url)
        server = CallbackServer(orchestrator, config)
        try:
            await server.start()
        except OSError as e:
            logger.error(f"Could not listen on {config.listen_host}:{config.port}: {e}")
            await server.stop()
            return 1
        try:
            await orchestrator.start()
            return await orchestrator.wait()
        finally:
            await server.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the YouTube subscription sync tool."""

    parser = argparse.ArgumentParser(description='YouTube Subscription Sync Tool')
    parser.add_argument('--config', default=CONFIG_FILE, metavar='PATH',
                        help=f'OAuth client configuration file (default: {CONFIG_FILE})')
    parser.add_argument('--client-secrets', metavar='PATH',
                        help='Google client secrets JSON used to create the configuration file')
    parser.add_argument('--no-browser', action='store_true',
                        help='Print login URLs instead of opening a browser')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    print("=== YouTube Subscription Sync ===")
    print("This tool copies subscriptions from one YouTube account to another.")
    print()

    try:
        config = load_or_create_config(args.config, args.client_secrets)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    open_url = (lambda url: print(f"\nOpen this URL to login:\n{url}\n")) if args.no_browser else open_in_browser

    try:
        return asyncio.run(run(config, open_url=open_url))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
