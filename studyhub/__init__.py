import logging
from flask import Flask
from flask_socketio import SocketIO
from flask_wtf.csrf import CSRFProtect
from config import Config

socketio = SocketIO()
csrf = CSRFProtect()


def create_app(config_class=Config, store=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    csrf.init_app(app)

    # Initialize Firebase
    if store is None:
        from studyhub.firebase_init import init_firebase
        store = init_firebase(app.config)
    app.extensions['studyhub.store'] = store

    # CORS origins
    allowed_origins = []
    cors_origins = app.config.get('CORS_ALLOWED_ORIGINS', '')
    if cors_origins:
        for origin in cors_origins.split(','):
            origin = origin.strip()
            if origin:
                allowed_origins.append(origin)

    # Handlers must be registered before init_app so every server gets them.
    from studyhub import events  # noqa: F401

    socketio.init_app(
        app,
        cors_allowed_origins=allowed_origins if allowed_origins else None,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE', 'threading')
    )

    # Register current_user context processor and before_request
    from studyhub.decorators import load_current_user, get_current_user

    @app.before_request
    def before_request():
        load_current_user()

    @app.context_processor
    def inject_current_user():
        return {
            'current_user': get_current_user(),
            'firebase_config': {
                'apiKey': app.config.get('FIREBASE_WEB_API_KEY', ''),
                'authDomain': app.config.get('FIREBASE_AUTH_DOMAIN', ''),
                'projectId': app.config.get('FIREBASE_PROJECT_ID', ''),
                'storageBucket': app.config.get('FIREBASE_STORAGE_BUCKET', ''),
                'appId': app.config.get('FIREBASE_APP_ID', ''),
            },
        }

    # Register blueprints
    from studyhub.routes import auth, main, documents, qna
    app.register_blueprint(auth.bp)
    app.register_blueprint(main.bp)
    app.register_blueprint(documents.bp)
    app.register_blueprint(qna.bp)

    return app
