import uvicorn

from abgate.core.app_factory import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run("abgate.main:app", host="0.0.0.0", port=8000, reload=True)
