from src.storage.state_store import STATE_PATH, StateStore

__all__ = ["STATE_PATH", "StateStore"]
