from bfsfind.main import entrypoint

entrypoint()
