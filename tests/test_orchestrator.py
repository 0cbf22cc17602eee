"""Tests for the two-phase login state machine, driven by synthetic callbacks."""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from youtube_subscription_sync import (
    Action,
    CallbackResult,
    Event,
    OAuthConfig,
    SessionPhase,
    Subscription,
    SubscriptionSyncOrchestrator,
    transition,
)


# ---------------------------------------------------------------------------
# Stubs
# ---------------------------------------------------------------------------


def subs(n: int) -> List[Subscription]:
    return [Subscription(f"Channel {i}", "youtube#channel", f"UC{i:04d}") for i in range(n)]


class StubClient:
    """Records calls instead of talking to YouTube."""

    def __init__(self, subscriptions: Optional[List[Subscription]] = None,
                 tokens: Optional[List[Optional[str]]] = None) -> None:
        self.subscriptions = subscriptions if subscriptions is not None else subs(3)
        self.tokens = list(tokens) if tokens is not None else ["source-token", "dest-token"]
        self.exchanged: List[str] = []
        self.extracted: List[str] = []
        self.imported: List[Tuple[str, List[Subscription]]] = []

    @property
    def calls(self) -> int:
        return len(self.exchanged) + len(self.extracted) + len(self.imported)

    async def exchange_code(self, code: str) -> Optional[str]:
        self.exchanged.append(code)
        return self.tokens.pop(0)

    async def extract_subscriptions(self, access_token: str) -> List[Subscription]:
        self.extracted.append(access_token)
        return list(self.subscriptions)

    async def import_subscriptions(self, access_token: str, subscriptions: List[Subscription]) -> dict:
        self.imported.append((access_token, subscriptions))
        return {"total": len(subscriptions), "successful": len(subscriptions), "failed": 0}


class Prompts:
    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.messages: List[str] = []

    async def __call__(self, message: str) -> bool:
        self.messages.append(message)
        return self.answers.pop(0)


class UrlBuilder:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self, config: OAuthConfig) -> Tuple[str, str]:
        self.count += 1
        state = f"state-{self.count}"
        return f"{config.authorization_url}?state={state}", state


def make_orchestrator(client: StubClient, prompts: Prompts):
    opened: List[str] = []
    orchestrator = SubscriptionSyncOrchestrator(
        client,
        OAuthConfig(client_id="id", client_secret="secret"),
        prompt=prompts,
        open_url=opened.append,
        url_builder=UrlBuilder(),
    )
    return orchestrator, opened


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


class TestTransition:
    def test_source_login_opens_browser(self) -> None:
        step = transition(SessionPhase.AWAITING_SOURCE, Event.SOURCE_CONFIRMED)
        assert step.phase is SessionPhase.AWAITING_SOURCE
        assert step.action is Action.OPEN_LOGIN

    def test_token_dispatch_depends_on_phase(self) -> None:
        assert transition(SessionPhase.AWAITING_SOURCE, Event.TOKEN_ISSUED).action is Action.COLLECT
        assert transition(SessionPhase.AWAITING_DESTINATION, Event.TOKEN_ISSUED).action is Action.REPLICATE

    def test_destination_confirmation_moves_phase(self) -> None:
        step = transition(SessionPhase.AWAITING_SOURCE, Event.DESTINATION_CONFIRMED)
        assert step.phase is SessionPhase.AWAITING_DESTINATION
        assert step.action is Action.OPEN_LOGIN

    def test_exit_classifications(self) -> None:
        assert transition(SessionPhase.AWAITING_SOURCE, Event.SOURCE_EMPTY).exit_code == 1
        assert transition(SessionPhase.AWAITING_DESTINATION, Event.REPLICATION_SETTLED).exit_code == 0
        assert transition(SessionPhase.AWAITING_SOURCE, Event.DECLINED).exit_code == 0
        assert transition(SessionPhase.AWAITING_DESTINATION, Event.FAILED).exit_code == 1
        assert transition(SessionPhase.AWAITING_DESTINATION, Event.DECLINED).phase is SessionPhase.FINISHED

    def test_unknown_pairs_are_noops(self) -> None:
        step = transition(SessionPhase.AWAITING_DESTINATION, Event.SOURCE_COLLECTED)
        assert step.phase is SessionPhase.AWAITING_DESTINATION
        assert step.action is Action.NONE

    def test_finished_is_terminal(self) -> None:
        for event in Event:
            step = transition(SessionPhase.FINISHED, event)
            assert step.phase is SessionPhase.FINISHED
            assert step.action is Action.NONE


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class TestOrchestrator:
    @pytest.mark.asyncio
    async def test_declining_first_prompt_exits_cleanly(self) -> None:
        client = StubClient()
        orchestrator, opened = make_orchestrator(client, Prompts(False))

        await orchestrator.start()

        assert await orchestrator.wait() == 0
        assert orchestrator.phase is SessionPhase.FINISHED
        assert opened == []
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_start_opens_source_login(self) -> None:
        orchestrator, opened = make_orchestrator(StubClient(), Prompts(True))

        await orchestrator.start()

        assert orchestrator.phase is SessionPhase.AWAITING_SOURCE
        assert orchestrator.state_token == "state-1"
        assert opened == [f"{orchestrator.config.authorization_url}?state=state-1"]

    @pytest.mark.asyncio
    async def test_full_sync(self) -> None:
        client = StubClient(subscriptions=subs(5))
        prompts = Prompts(True, True)
        orchestrator, opened = make_orchestrator(client, prompts)
        await orchestrator.start()

        result = await orchestrator.handle_callback("code-1", "state-1")

        assert result is CallbackResult.ACCEPTED
        assert orchestrator.phase is SessionPhase.AWAITING_DESTINATION
        assert orchestrator.state_token == "state-2"
        assert len(opened) == 2
        assert "5 channels" in prompts.messages[1]

        result = await orchestrator.handle_callback("code-2", "state-2")

        assert result is CallbackResult.ACCEPTED
        assert await orchestrator.wait() == 0
        assert client.extracted == ["source-token"]
        assert client.imported == [("dest-token", subs(5))]

    @pytest.mark.asyncio
    async def test_missing_code_changes_nothing(self) -> None:
        client = StubClient()
        orchestrator, _ = make_orchestrator(client, Prompts(True))
        await orchestrator.start()

        for code in (None, "", ["a", "b"]):
            assert await orchestrator.handle_callback(code, "state-1") is CallbackResult.MISSING_CODE

        assert orchestrator.phase is SessionPhase.AWAITING_SOURCE
        assert orchestrator.subscriptions == ()
        assert orchestrator.state_token == "state-1"
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_invalid_state_changes_nothing(self) -> None:
        client = StubClient()
        orchestrator, _ = make_orchestrator(client, Prompts(True))
        await orchestrator.start()

        assert await orchestrator.handle_callback("code", None) is CallbackResult.INVALID_STATE
        assert await orchestrator.handle_callback("code", "forged") is CallbackResult.INVALID_STATE

        assert orchestrator.phase is SessionPhase.AWAITING_SOURCE
        assert orchestrator.subscriptions == ()
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_denied_consent_is_reported(self) -> None:
        client = StubClient()
        orchestrator, _ = make_orchestrator(client, Prompts(True))
        await orchestrator.start()

        result = await orchestrator.handle_callback(None, "state-1", error="access_denied")

        assert result is CallbackResult.MISSING_CODE
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_regenerated_state_rejects_old_value(self) -> None:
        client = StubClient(subscriptions=subs(2))
        orchestrator, _ = make_orchestrator(client, Prompts(True, True))
        await orchestrator.start()
        await orchestrator.handle_callback("code-1", "state-1")

        # A well-formed redirect bearing the source login's state
        result = await orchestrator.handle_callback("code-again", "state-1")

        assert result is CallbackResult.INVALID_STATE
        assert orchestrator.phase is SessionPhase.AWAITING_DESTINATION
        assert client.extracted == ["source-token"]
        assert client.imported == []

    @pytest.mark.asyncio
    async def test_failed_exchange_keeps_phase(self) -> None:
        client = StubClient(tokens=[None, "source-token"])
        orchestrator, opened = make_orchestrator(client, Prompts(True, True))
        await orchestrator.start()

        assert await orchestrator.handle_callback("bad-code", "state-1") is CallbackResult.NO_TOKEN
        assert orchestrator.phase is SessionPhase.AWAITING_SOURCE
        assert client.extracted == []
        assert len(opened) == 1

        # The user retries the same login link manually
        assert await orchestrator.handle_callback("good-code", "state-1") is CallbackResult.ACCEPTED
        assert orchestrator.phase is SessionPhase.AWAITING_DESTINATION

    @pytest.mark.asyncio
    async def test_failed_destination_exchange_keeps_phase(self) -> None:
        client = StubClient(tokens=["source-token", None])
        orchestrator, _ = make_orchestrator(client, Prompts(True, True))
        await orchestrator.start()
        await orchestrator.handle_callback("code-1", "state-1")

        assert await orchestrator.handle_callback("code-2", "state-2") is CallbackResult.NO_TOKEN
        assert orchestrator.phase is SessionPhase.AWAITING_DESTINATION
        assert client.imported == []

    @pytest.mark.asyncio
    async def test_empty_source_is_fatal(self) -> None:
        client = StubClient(subscriptions=[])
        prompts = Prompts(True)
        orchestrator, opened = make_orchestrator(client, prompts)
        await orchestrator.start()

        await orchestrator.handle_callback("code-1", "state-1")

        assert await orchestrator.wait() == 1
        assert orchestrator.phase is SessionPhase.FINISHED
        # Only the source login was ever opened
        assert len(opened) == 1
        assert len(prompts.messages) == 1

    @pytest.mark.asyncio
    async def test_declining_destination_exits_cleanly(self) -> None:
        client = StubClient()
        orchestrator, opened = make_orchestrator(client, Prompts(True, False))
        await orchestrator.start()

        await orchestrator.handle_callback("code-1", "state-1")

        assert await orchestrator.wait() == 0
        assert len(opened) == 1
        assert client.imported == []

    @pytest.mark.asyncio
    async def test_callbacks_after_finish_are_ignored(self) -> None:
        client = StubClient(tokens=["source-token", "dest-token", "extra"])
        orchestrator, _ = make_orchestrator(client, Prompts(True, True))
        await orchestrator.start()
        await orchestrator.handle_callback("code-1", "state-1")
        await orchestrator.handle_callback("code-2", "state-2")

        assert await orchestrator.handle_callback("code-3", "state-2") is CallbackResult.IGNORED
        assert len(client.imported) == 1
        assert len(client.exchanged) == 2

    @pytest.mark.asyncio
    async def test_subscriptions_survive_to_replication(self) -> None:
        client = StubClient(subscriptions=subs(4))
        orchestrator, _ = make_orchestrator(client, Prompts(True, True))
        await orchestrator.start()
        await orchestrator.handle_callback("code-1", "state-1")
        captured = orchestrator.subscriptions

        # Rejected redirects in between do not touch the collected list
        await orchestrator.handle_callback("code-x", "state-1")
        await orchestrator.handle_callback(None, "state-2")
        await orchestrator.handle_callback("code-2", "state-2")

        assert len(client.imported) == 1
        assert client.imported[0][1] == list(captured)
        assert captured == tuple(subs(4))

    @pytest.mark.asyncio
    async def test_fail_finishes_with_error_status(self) -> None:
        orchestrator, _ = make_orchestrator(StubClient(), Prompts(True))
        await orchestrator.start()

        orchestrator.fail()

        assert await orchestrator.wait() == 1
        assert orchestrator.state_token is None
