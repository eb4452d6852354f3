#!/usr/bin/env python3
"""
Crane Digital Twin Backend - Flask + WebSocket Server
Simulates a 5-DOF robotic crane and streams its state to connected clients.

Usage:
    python app.py                                   # Uses default config
    python app.py --config path/to/crane.yaml       # Custom config
    python app.py --port 9000 --refresh-ms 33       # Override server settings
"""
import sys
import os
import threading
import logging
import argparse
from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit
from flask_cors import CORS

from crane import (
    ClientSession,
    CommandRouter,
    ConfigError,
    ServerSettings,
    SharedState,
    SimulationLoop,
    build_crane,
    load_config,
)
from crane.config import validate_config

# Disable Flask's request logging
log = logging.getLogger('werkzeug')
log.setLevel(logging.ERROR)

logger = logging.getLogger('crane.server')

# Local config path (self-contained in the repository)
LOCAL_CONFIG_PATH = os.path.join(os.path.dirname(__file__), '..', 'robot_param', 'crane.yaml')

app = Flask(__name__)
CORS(app, origins="*")
socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')

# Active configuration and shared simulation state
crane_config = None
shared = None
router = None
simulation = None

# Client sessions keyed by Socket.IO sid
sessions = {}
sessions_lock = threading.Lock()


def init_crane(config):
    """Build the crane and shared state from a configuration dict."""
    global crane_config, shared, router

    crane_config = config
    settings = ServerSettings(refresh_ms=config['server']['refresh_ms'])
    shared = SharedState(build_crane(config), settings)
    router = CommandRouter(shared)

    geometry = config['crane']['geometry']
    logger.info("Crane initialized: %s (r3=%.3f m, r4=%.3f m, lift travel %.3f m)",
                config['crane']['name'], geometry['r3'], geometry['r4'], geometry['d2_max'])
    return shared


def start_loops():
    """Start the physics tick loop."""
    global simulation

    simulation = SimulationLoop(shared, tick_ms=crane_config['simulation']['tick_ms'])
    simulation.start()
    return simulation


def config_payload():
    """Configuration summary sent to clients."""
    return {
        "crane_name": crane_config['crane']['name'],
        "geometry": crane_config['crane']['geometry'],
        "tick_ms": crane_config['simulation']['tick_ms'],
        "refresh_ms": shared.refresh_ms(),
        "joints": list(shared.crane.joints().keys()),
        "running": simulation is not None and simulation.running,
    }


# ============== REST API Routes ==============

@app.route('/api/config')
def get_config():
    """Get crane configuration for frontend"""
    return jsonify(config_payload())


@app.route('/api/state')
def get_state():
    """Get current crane state (REST fallback)"""
    return jsonify(shared.snapshot().to_dict())


@app.route('/api/command', methods=['POST'])
def post_command():
    """Apply one text command (REST fallback)"""
    data = request.get_json(silent=True) or {}
    command = data.get('command')

    if not isinstance(command, str):
        return jsonify({"success": False, "error": "Missing 'command' string"}), 400

    if not router.handle_message(command):
        return jsonify({"success": False, "error": f"Rejected command: {command}"}), 400

    return jsonify({"success": True})


# ============== WebSocket Events ==============

@socketio.on('connect')
def handle_connect():
    """Handle new WebSocket connection"""
    sid = request.sid

    def send_state(text):
        socketio.send(text, to=sid)

    session = ClientSession(sid, router, send_state)
    with sessions_lock:
        sessions[sid] = session
        total = len(sessions)
    logger.info("Client connected: %s (total: %d)", sid, total)

    # Send initial config
    emit('config', config_payload())

    socketio.start_background_task(session.run_outbound)


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    """Handle WebSocket disconnection"""
    with sessions_lock:
        session = sessions.pop(request.sid, None)
        total = len(sessions)

    if session is not None:
        session.close()
    logger.info("Client disconnected: %s (total: %d)", request.sid, total)


@socketio.on('message')
def handle_message(data):
    """Handle a text command from a client"""
    if not isinstance(data, str):
        logger.warning("Ignoring non-text message from %s: %r", request.sid, data)
        return

    with sessions_lock:
        session = sessions.get(request.sid)

    if session is None:
        router.handle_message(data)
    else:
        session.handle_message(data)


# ============== Main ==============

def main(argv=None):
    parser = argparse.ArgumentParser(description='Crane Digital Twin Backend Server')
    parser.add_argument('--config', '-c', type=str,
                        default=LOCAL_CONFIG_PATH,
                        help='Path to crane config YAML')
    parser.add_argument('--host', type=str, default=None,
                        help='Bind address (default from config)')
    parser.add_argument('--port', '-p', type=int, default=None,
                        help='Server port (default from config)')
    parser.add_argument('--tick-ms', type=int, default=None,
                        help='Physics timestep in milliseconds')
    parser.add_argument('--refresh-ms', type=int, default=None,
                        help='Initial state broadcast interval in milliseconds')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    print("=" * 50)
    print("Crane Digital Twin Backend Server")
    print("=" * 50)

    config_path = args.config
    if not os.path.isabs(config_path):
        config_path = os.path.join(os.getcwd(), config_path)

    print(f"\n1. Loading configuration from: {config_path}")
    try:
        config = load_config(config_path)
        if args.host is not None:
            config['server']['host'] = args.host
        if args.port is not None:
            config['server']['port'] = args.port
        if args.tick_ms is not None:
            config['simulation']['tick_ms'] = args.tick_ms
        if args.refresh_ms is not None:
            config['server']['refresh_ms'] = args.refresh_ms
        # re-validate command line overrides
        validate_config(config)
    except ConfigError as e:
        print(f"Failed to load config: {e}")
        return 1

    print("\n2. Initializing crane...")
    init_crane(config)

    print("\n3. Starting simulation loop...")
    start_loops()

    host = config['server']['host']
    port = config['server']['port']
    print(f"\n4. Starting server on {host}:{port}...")
    print(f"\n   Backend API: http://{host}:{port}")
    print(f"   WebSocket:   ws://{host}:{port}")
    print("=" * 50)

    socketio.run(app, host=host, port=port, debug=False, allow_unsafe_werkzeug=True)
    return 0


if __name__ == '__main__':
    sys.exit(main())
