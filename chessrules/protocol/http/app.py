from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    illegal_move_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...engine.attacks import attackers_of, king_square
from ...engine.board import opponent
from ...engine.game import Game
from ...engine.move import IllegalMoveError, Move, parse_uci, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.terminal import GameStatus, is_game_over
from ...search.levels import SEARCH_LEVEL, choose_move, search_depth_for_level
from ...search.service import MAX_DEPTH, SearchService


logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 4
MAX_LEVEL = 10
MAX_PERFT_DEPTH = 4


class MoveModel(BaseModel):
    from_sq: str
    to_sq: str
    capture: bool
    special: str
    promotion: Optional[str] = None
    uci: str


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="Position string in FEN layout")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Long algebraic move, e.g. e2e4 or e7e8n")


class SearchRequest(BaseModel):
    level: Optional[int] = Field(default=None, ge=1, le=MAX_LEVEL)
    depth: Optional[int] = Field(default=None, ge=0, le=MAX_DEPTH)


class SearchResponse(BaseModel):
    best_move: Optional[MoveModel]
    score: Optional[int]
    nodes: Optional[int]
    depth: Optional[int]
    level: Optional[int]
    time_ms: int


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class LegalMovesResponse(BaseModel):
    game_id: str
    square: Optional[str]
    moves: list[MoveModel]


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    status: str
    legal_moves: list[MoveModel]
    in_check: bool
    checkers: list[str]
    checkmate: bool
    stalemate: bool
    draw: bool
    game_over: bool
    last_move: Optional[str]
    move_history: list[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Rules Engine API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, illegal_move_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        session = _require_session(store, game_id)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=session.game.to_fen())

    # Engine-bound endpoints are plain `def` so FastAPI runs them in its
    # thread pool and the event loop stays free while a search runs.
    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            return _game_state(game_id, session.game)

    @app.get("/api/games/{game_id}/moves", response_model=LegalMovesResponse)
    def get_moves(game_id: str, square: Optional[str] = None) -> LegalMovesResponse:
        session = _require_session(store, game_id)
        sq = None
        if square is not None:
            try:
                sq = str_to_square(square)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        with session.lock:
            moves = session.game.legal_moves(sq)
        return LegalMovesResponse(game_id=game_id, square=square, moves=[_move_model(m) for m in moves])

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_session(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.replace_game(game_id, game)
        session = _require_session(store, game_id)
        with session.lock:
            return _game_state(game_id, session.game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_session(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with session.lock:
            if is_game_over(session.game.status()):
                raise HTTPException(status_code=409, detail="game is over")
            # IllegalMoveError is rendered by its exception handler
            session.game.apply_move(move)
            return _game_state(game_id, session.game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    def search(game_id: str, req: SearchRequest) -> SearchResponse:
        session = _require_session(store, game_id)
        with session.lock:
            game = session.game
            depth = req.depth
            level = None
            if depth is None:
                level = req.level or DEFAULT_LEVEL
                if level < SEARCH_LEVEL:
                    mv = choose_move(game.board, level)
                    return SearchResponse(
                        best_move=_move_model(mv) if mv else None,
                        score=None,
                        nodes=None,
                        depth=None,
                        level=level,
                        time_ms=0,
                    )
                depth = search_depth_for_level(level)
            res = SearchService().search(game.board, depth=depth, repetition=game.repetition)
        logger.info(
            "search",
            extra={
                "game_id": game_id,
                "depth": res.depth,
                "nodes": res.nodes,
                "time_ms": res.time_ms,
            },
        )
        return SearchResponse(
            best_move=_move_model(res.best_move) if res.best_move else None,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            level=level,
            time_ms=res.time_ms,
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            try:
                session.game.undo_move()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _game_state(game_id, session.game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(game.board, req.depth)}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _move_model(move: Move) -> MoveModel:
    return MoveModel(**move.to_dict())


def _game_state(game_id: str, game: Game) -> GameState:
    board = game.board
    status = game.status()
    checkers: list[str] = []
    ks = king_square(board, board.side_to_move)
    if ks is not None:
        checkers = [square_to_str(sq) for sq in attackers_of(board, ks, opponent(board.side_to_move))]
    history = game.move_history_uci()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=board.side_to_move,
        status=status.value,
        legal_moves=[_move_model(m) for m in game.legal_moves()],
        in_check=bool(checkers),
        checkers=checkers,
        checkmate=status is GameStatus.CHECKMATE,
        stalemate=status is GameStatus.STALEMATE,
        draw=is_game_over(status) and status is not GameStatus.CHECKMATE,
        game_over=is_game_over(status),
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
