from vaulthunt import create_app, socketio
from vaulthunt.services.lifecycle.retention import schedule_retention_sweep

app = create_app()

if __name__ == '__main__':
    schedule_retention_sweep(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
