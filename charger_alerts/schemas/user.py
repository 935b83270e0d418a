from pydantic import BaseModel


class UserObject(BaseModel):
    uid: str

    def get(self, key: str, default=None):
        """Allow dictionary-style access with .get() method"""
        if hasattr(self, key):
            return getattr(self, key)
        return default

    def __getitem__(self, key: str):
        """Allow dictionary-style access with [] operator"""
        return self.get(key)
