"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json

from src.services.listing_cache import get_listing_cache


class handler(BaseHTTPRequestHandler):
    """Health check handler for serverless deployment; also reports listing cache state."""

    def do_GET(self):
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        response = json.dumps({
            "status": "ok",
            "service": "housebroker-backend",
            "listing_cache": get_listing_cache().stats(),
        })
        self.wfile.write(response.encode('utf-8'))

    def do_POST(self):
        """Same as GET for health checks."""
        self.do_GET()
