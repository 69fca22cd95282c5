"""
Configuration for the bencode decoder and its HTTP front end.
Loads settings from a .env file with fallback to defaults.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ===== Decoder =====
DEFAULT_MAX_DEPTH = int(os.getenv('BDECODE_MAX_DEPTH', '256'))
READ_CHUNK_SIZE = int(os.getenv('BDECODE_CHUNK_SIZE', str(64 * 1024)))  # bytes

# ===== Server =====
HOST = os.getenv('BDECODE_HOST', '0.0.0.0')
PORT = int(os.getenv('BDECODE_PORT', '8000'))
MAX_UPLOAD_SIZE = int(os.getenv('BDECODE_MAX_UPLOAD_SIZE', str(16 * 1024 * 1024)))  # 16MB

# ===== Logging =====
DEBUG = os.getenv('BDECODE_DEBUG', 'False').lower() in ('true', '1', 't')
LOG_LEVEL = os.getenv('BDECODE_LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
