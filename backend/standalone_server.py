import os

from collection_importer.main import app

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("COLLECTION_IMPORTER_HOST", "127.0.0.1")
    port = int(os.getenv("COLLECTION_IMPORTER_PORT", "4010"))
    uvicorn.run(app, host=host, port=port, log_level="info")
