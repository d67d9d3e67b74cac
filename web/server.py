"""
Admin transport server.
Uses aiohttp for async web serving and a websocket per admin client.
"""
import json
import logging
import secrets

from aiohttp import WSMsgType, web

from web.api import ApiRegistry

logger = logging.getLogger("reactbot.web")


class ApiConnection:
    """What API handlers see of a websocket: an async send()."""

    def __init__(self, ws):
        self.ws = ws

    async def send(self, text):
        if self.ws.closed:
            logger.debug("Dropping admin reply, websocket already closed")
            return
        await self.ws.send_str(text)


def extract_token(request):
    """Token from ?token=... or an Authorization: Bearer header."""
    token = request.query.get('token')
    if token:
        return token
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip()
    return None


class WebServer:
    """Web server carrying the admin websocket."""

    def __init__(self, registry: ApiRegistry, host='127.0.0.1', port=8080, token=None):
        """
        Initialize web server.

        Args:
            registry: Operation registry frames are routed through
            host: Host to bind to
            port: Port to listen on
            token: Shared secret admin clients must present
        """
        self.registry = registry
        self.host = host
        self.port = port
        self.token = token
        self.app = web.Application()
        self.app['api'] = registry
        self.runner = None

        if not token:
            logger.warning("ADMIN_API_TOKEN not configured. Admin connections will be refused.")

        # Set up routes
        self._setup_routes()

    def _setup_routes(self):
        """Set up all web routes."""
        self.app.router.add_get('/', self.handle_index)
        self.app.router.add_get('/ws', self.handle_websocket)

    def is_authorized(self, request):
        supplied = extract_token(request)
        if not self.token or not supplied:
            return False
        return secrets.compare_digest(supplied, self.token)

    async def handle_index(self, request):
        return web.json_response({"service": "reactbot admin", "status": "running"})

    async def handle_websocket(self, request):
        """Accept an admin websocket and route its frames."""
        if not self.is_authorized(request):
            logger.warning("Refused admin connection from %s", request.remote)
            return web.Response(text='Forbidden', status=403)

        ws = web.WebSocketResponse()
        await ws.prepare(request)
        connection = ApiConnection(ws)
        logger.info("Admin client connected from %s", request.remote)

        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                try:
                    payload = json.loads(msg.data)
                except ValueError:
                    logger.warning("Ignoring malformed admin frame")
                    continue
                await self.registry.dispatch(connection, payload)
            elif msg.type == WSMsgType.ERROR:
                logger.warning("Admin websocket closed with exception %s", ws.exception())

        logger.info("Admin client disconnected")
        return ws

    async def start(self):
        """Start the web server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Admin API started at http://{self.host}:{self.port}")

    async def stop(self):
        """Stop the web server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Admin API stopped")
