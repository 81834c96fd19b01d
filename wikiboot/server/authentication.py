# wikiboot/server/authentication.py
import hmac
import logging
from typing import Dict, Optional

from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Authenticator:
    def is_authenticated(self, username: Optional[str], password: Optional[str]) -> bool:
        raise NotImplementedError

    def __str__(self):
        return self.__class__.__name__


class PromiscuousAuthenticator(Authenticator):
    """Lets every request through."""

    def is_authenticated(self, username, password) -> bool:
        return True


class OneUserAuthenticator(Authenticator):
    def __init__(self, username: str, password: str):
        self.username = username
        self._password = password

    def is_authenticated(self, username, password) -> bool:
        if username is None or password is None:
            return False
        return (hmac.compare_digest(username, self.username)
                and hmac.compare_digest(password, self._password))

    def __str__(self):
        return f"{self.__class__.__name__}({self.username})"


class MultiUserAuthenticator(Authenticator):
    """
    Reads 'user:password' lines from a password file.

    Blank lines and lines starting with '#' are ignored. A file that cannot
    be read is a configuration error.
    """

    def __init__(self, password_file: str):
        self.password_file = password_file
        self._users: Dict[str, str] = {}
        try:
            with open(password_file, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue
                    user, sep, password = line.partition(':')
                    if not sep:
                        logger.warning(f"{password_file}:{line_number}: ignoring line without ':'")
                        continue
                    self._users[user] = password
        except OSError as e:
            raise ConfigurationError(f"Unable to read password file '{password_file}': {e}") from e
        logger.debug(f"Loaded {len(self._users)} users from {password_file}")

    def is_authenticated(self, username, password) -> bool:
        if username is None or password is None or username not in self._users:
            return False
        return hmac.compare_digest(password, self._users[username])

    def __str__(self):
        return f"{self.__class__.__name__}({self.password_file})"


def make_authenticator_from_userpass(userpass: str) -> Authenticator:
    """'user:pwd' selects a single user, anything else names a password file."""
    if ':' in userpass:
        username, _, password = userpass.partition(':')
        return OneUserAuthenticator(username, password)
    return MultiUserAuthenticator(userpass)
