import os

from docstore import create_app
from docstore.config import DevConfig, ProdConfig

env = os.getenv("DOCSTORE_ENV", "dev").strip().lower()
app = create_app(ProdConfig if env in {"prod", "production"} else DevConfig)

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5003"))
    app.run(host=host, port=port, debug=app.config["DEBUG"])
