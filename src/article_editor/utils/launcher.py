import socket
import subprocess
import sys
from pathlib import Path
from typing import Optional


def find_free_port(start_port: int = 5000, max_tries: int = 10) -> Optional[int]:
    """
    Scans for an available network port starting from 'start_port'.

    Returns:
        int: The first available port found.
        None: If all ports in the range are occupied.
    """
    for port in range(start_port, start_port + max_tries):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(('127.0.0.1', port))
                return port
            except OSError:
                continue
    return None


def launch_upload_server_detached(port: int, upload_dir: Optional[Path] = None) -> Optional[subprocess.Popen]:
    """
    Starts the upload gateway in a background process so its request log
    stays out of the shell session.
    """
    cmd_args = [sys.executable, "-m", "article_editor.server.app", "--port", str(port)]
    if upload_dir:
        cmd_args += ["--upload-dir", str(upload_dir)]

    print(f"🚀 Launching upload gateway on port {port}...")
    try:
        process = subprocess.Popen(
            cmd_args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        print(f"❌ Failed to launch server: {e}")
        return None

    print(f"✅ Server detached (pid {process.pid}).")
    return process
