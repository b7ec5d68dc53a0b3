# module booking_engine.app
"""
Instance FastAPI unique de l'application, construite par la factory.
Les entrypoints (asgi, __main__, tests) importent `app` depuis ce module.
"""
from booking_engine.app_setup.factory import create_app

app = create_app()
