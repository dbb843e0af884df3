try:
    from backend.musicbingo.server import create_app
except ImportError:  # pragma: no cover
    from musicbingo.server import create_app

app, socketio = create_app()
