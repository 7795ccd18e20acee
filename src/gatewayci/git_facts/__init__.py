from .git import current_ref, head_sha, remote_url

__all__ = ["current_ref", "head_sha", "remote_url"]
