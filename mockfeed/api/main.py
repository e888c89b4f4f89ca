from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, WebSocket
import uvicorn

from mockfeed.core.ids import new_session_id
from mockfeed.core.settings import FeedSettings, load_settings
from mockfeed.core.transport import OutboundQueue
from mockfeed.feed.session import Session


logger = logging.getLogger(__name__)


def create_app(settings: FeedSettings | None = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="mockfeed")
    app.state.settings = settings
    app.state.sessions = {}

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "sessions": len(app.state.sessions)}

    @app.websocket(settings.ws_path)
    async def feed(websocket: WebSocket) -> None:
        await websocket.accept()
        connection_id = new_session_id()
        logger.info("connection accepted", extra={"connection_id": connection_id})

        outbound = OutboundQueue(connection_id=connection_id)
        writer = asyncio.create_task(outbound.drain(websocket.send_text))
        session = Session(send=outbound.send, settings=settings, session_id=connection_id)
        app.state.sessions[connection_id] = session
        try:
            session.start()
            # No inbound protocol: frames are read only to notice the disconnect.
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            session.close()
            app.state.sessions.pop(connection_id, None)
            outbound.close()
            writer.cancel()
            await asyncio.gather(writer, return_exceptions=True)
            logger.info("closed", extra={"connection_id": connection_id, "sent": outbound.sent})

    return app


app = create_app()


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
