"""Application settings."""

from typing import Optional


class Settings:
    """Game and relay settings, overridable from config.yaml."""

    def __init__(self):
        # Window
        self.window_width = 960
        self.window_height = 640
        self.fps = 60
        self.title = "Dealer's Dojo"

        # Levels
        self.catalog_source: Optional[str] = None
        self.catalog_path: Optional[str] = None

        # AI
        self.ai_provider = "gemini"
        self.ai_model = "gemini-1.5-pro-latest"

        # Save
        self.save_path = "./save/progress.json"

        # Relay client
        self.relay_url = "http://127.0.0.1:8000"
        self.relay_timeout: Optional[float] = None

        # Web server
        self.server_host = "127.0.0.1"
        self.server_port = 8000
        self.static_root: Optional[str] = None

        # Logging
        self.log_level = "INFO"

    def load_from_dict(self, config: dict) -> None:
        if "window" in config:
            w = config["window"]
            self.window_width = w.get("width", self.window_width)
            self.window_height = w.get("height", self.window_height)
            self.fps = w.get("fps", self.fps)
            self.title = w.get("title", self.title)

        if "catalog" in config:
            c = config["catalog"]
            self.catalog_source = c.get("source", self.catalog_source)
            self.catalog_path = c.get("path", self.catalog_path)

        if "ai" in config:
            ai = config["ai"]
            self.ai_provider = ai.get("provider", self.ai_provider)
            self.ai_model = ai.get("model", self.ai_model)

        if "save" in config:
            s = config["save"]
            self.save_path = s.get("path", self.save_path)

        if "relay" in config:
            r = config["relay"]
            self.relay_url = r.get("url", self.relay_url)
            self.relay_timeout = r.get("timeout", self.relay_timeout)

        if "server" in config:
            srv = config["server"]
            self.server_host = srv.get("host", self.server_host)
            self.server_port = srv.get("port", self.server_port)
            self.static_root = srv.get("static_root", self.static_root)

        if "logging" in config:
            self.log_level = config["logging"].get("level", self.log_level)
