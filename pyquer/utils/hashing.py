import hashlib

def compute_sha256(data: bytes) -> str:
    """Compute SHA256 hash of file contents"""
    return hashlib.sha256(data).hexdigest()
