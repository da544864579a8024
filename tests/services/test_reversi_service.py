"""Unit tests for src/services/reversi_service.py"""

import pytest

from src.api.models import (
    MoveRequest,
    PlayerLists,
    PlayerSummary,
    RegisterRequest,
    StartGameRequest,
)
from src.core.config import SessionConfig
from src.core.exceptions import (
    GameStateError,
    RegisterError,
    SessionCancelledError,
    StartGameError,
)
from src.core.shared_types import Color, RegisterErrorCode, SessionStatus, StartErrorCode
from src.reversi.replay import replay
from src.services.reconciliation import ReconcileAction
from src.services.reversi_service import ReversiService
from tests.fakes import BLACK_PLAYER, WHITE_PLAYER, FakeGameService, wait_until


def start_request(
    player: str = BLACK_PLAYER, opponent: str = WHITE_PLAYER, dimension: int = 6
) -> StartGameRequest:
    return StartGameRequest(player_name=player, opponent_name=opponent, dimension=dimension)


# --- SERVICE - START GAME ----
@pytest.mark.asyncio
async def test_start_game(fake_service: FakeGameService) -> None:
    service = ReversiService(fake_service)

    view = await service.start_game(start_request())

    assert view.status == SessionStatus.ACTIVE
    assert view.player_color == Color.BLACK
    assert view.is_my_turn
    assert view.board == replay(6, []).board.to_string()
    assert service.polling

    await service.unmount()
    assert not service.polling


@pytest.mark.asyncio
async def test_join_running_game(fake_service: FakeGameService) -> None:
    fake_service.set_game(moves=[8])
    service = ReversiService(fake_service)

    view = await service.start_game(start_request(player=WHITE_PLAYER, opponent=BLACK_PLAYER))
    await service.unmount()

    assert view.player_color == Color.WHITE
    assert view.move_count == 1
    assert view.is_my_turn


@pytest.mark.asyncio
async def test_opponent_not_found_suggests_swapped_names(
    fake_service: FakeGameService,
) -> None:
    fake_service.start_error = StartGameError(StartErrorCode.OPPONENT_NOT_FOUND)
    service = ReversiService(fake_service)

    with pytest.raises(StartGameError) as exc_info:
        await service.start_game(start_request())

    assert exc_info.value.code == StartErrorCode.OPPONENT_NOT_FOUND
    assert exc_info.value.retry_as == (WHITE_PLAYER, BLACK_PLAYER)
    assert service.session is None
    assert not service.polling


@pytest.mark.asyncio
async def test_opponent_busy_names_the_opponent(fake_service: FakeGameService) -> None:
    fake_service.start_error = StartGameError(StartErrorCode.OPPONENT_BUSY)
    service = ReversiService(fake_service)

    with pytest.raises(StartGameError) as exc_info:
        await service.start_game(start_request())

    assert exc_info.value.code == StartErrorCode.OPPONENT_BUSY
    assert exc_info.value.detail == WHITE_PLAYER


@pytest.mark.asyncio
async def test_unexpected_start_failure(fake_service: FakeGameService) -> None:
    fake_service.start_error = ConnectionError("network down")
    service = ReversiService(fake_service)

    with pytest.raises(StartGameError) as exc_info:
        await service.start_game(start_request())

    assert exc_info.value.code == StartErrorCode.OTHER


# --- SERVICE - REGISTER ----
@pytest.mark.asyncio
async def test_register(fake_service: FakeGameService) -> None:
    service = ReversiService(fake_service)

    info = await service.register(RegisterRequest(name="  Alice "))
    assert info is not None
    assert info.name == "Alice"

    # empty name: look up the existing registration
    again = await service.register(RegisterRequest())
    assert again == info


@pytest.mark.asyncio
async def test_register_error_codes_pass_through(fake_service: FakeGameService) -> None:
    fake_service.register_error = RegisterError(RegisterErrorCode.NAME_ALREADY_EXISTS)
    service = ReversiService(fake_service)

    with pytest.raises(RegisterError) as exc_info:
        await service.register(RegisterRequest(name=BLACK_PLAYER))
    assert exc_info.value.code == RegisterErrorCode.NAME_ALREADY_EXISTS


@pytest.mark.asyncio
async def test_unexpected_register_failure(fake_service: FakeGameService) -> None:
    fake_service.register_error = TimeoutError()
    service = ReversiService(fake_service)

    with pytest.raises(RegisterError) as exc_info:
        await service.register(RegisterRequest(name=BLACK_PLAYER))
    assert exc_info.value.code == RegisterErrorCode.OTHER


# --- SERVICE - PLAYING ----
@pytest.mark.asyncio
async def test_play_a_round(fake_service: FakeGameService) -> None:
    """Black moves optimistically, white answers on the remote side, the refresh brings it in."""
    service = ReversiService(fake_service)
    await service.start_game(start_request())
    await service.unmount()

    assert service.request_move(MoveRequest(row=1, col=2))
    assert not service.view().is_my_turn
    await service.drain_submissions()
    assert fake_service.game is not None
    assert fake_service.game.moves == [8]

    assert (await service.refresh()).action == ReconcileAction.UNCHANGED

    fake_service.append_move(7)
    result = await service.refresh()

    assert result.action == ReconcileAction.CAUGHT_UP
    view = service.view()
    assert view.is_my_turn
    assert view.board == replay(6, [8, 7]).board.to_string()


@pytest.mark.asyncio
async def test_move_before_start(fake_service: FakeGameService) -> None:
    service = ReversiService(fake_service)
    assert not service.request_move(MoveRequest(row=1, col=2))
    assert service.view().status == SessionStatus.UNINITIALIZED
    with pytest.raises(GameStateError):
        service.require_active()
    with pytest.raises(GameStateError):
        await service.refresh()


@pytest.mark.asyncio
async def test_opponent_leaving_while_polling(
    fake_service: FakeGameService, fast_config: SessionConfig
) -> None:
    changes = []
    service = ReversiService(fake_service, fast_config, on_change=changes.append)
    await service.start_game(start_request())

    fake_service.set_game(white="")
    await wait_until(lambda: not service.polling)

    assert service.view().status == SessionStatus.CANCELLED
    assert changes[-1].action == ReconcileAction.CANCELLED
    with pytest.raises(SessionCancelledError):
        service.require_active()
    assert not service.request_move(MoveRequest(row=1, col=2))
    await service.unmount()


@pytest.mark.asyncio
async def test_starting_again_stops_the_previous_loop(
    fake_service: FakeGameService, fast_config: SessionConfig
) -> None:
    service = ReversiService(fake_service, fast_config)
    await service.start_game(start_request())
    first_session = service.session

    await service.start_game(start_request())

    assert service.session is not first_session
    assert service.polling
    await service.unmount()


@pytest.mark.asyncio
async def test_mount_after_unmount_resumes(
    fake_service: FakeGameService, fast_config: SessionConfig
) -> None:
    service = ReversiService(fake_service, fast_config)
    await service.start_game(start_request())
    await service.unmount()

    service.mount()
    assert service.polling
    fake_service.append_move(8)
    await wait_until(lambda: service.view().move_count == 1)
    await service.unmount()


# --- SERVICE - LOBBY ----
@pytest.mark.asyncio
async def test_list_players(fake_service: FakeGameService) -> None:
    fake_service.players = PlayerLists(top=[PlayerSummary(name=BLACK_PLAYER, score=12)])
    service = ReversiService(fake_service)

    lists = await service.list_players()
    assert [player.name for player in lists.top] == [BLACK_PLAYER]


@pytest.mark.asyncio
async def test_list_players_failure_is_ignored(fake_service: FakeGameService) -> None:
    fake_service.list_error = ConnectionError()
    service = ReversiService(fake_service)

    assert await service.list_players() == PlayerLists()


def test_from_env(fake_service: FakeGameService, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REVERSI_REFRESH_INTERVAL", "2.5")
    monkeypatch.setenv("REVERSI_LOG_LEVEL", "debug")

    service = ReversiService.from_env(fake_service)

    assert service.config.refresh_interval == 2.5
    assert service.config.log_level == "DEBUG"
