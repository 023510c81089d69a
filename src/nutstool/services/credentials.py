"""Interactive credential acquisition for nuts-tool."""

import getpass
from typing import Callable, Optional

from nutstool.constants import PASSWORD_PROMPT, REPEAT_PASSWORD_PROMPT
from nutstool.errors import PromptError

PasswordCallback = Callable[[], bytes]


class PasswordPrompt:
    """Asks the operator for a password with terminal echo disabled.

    Instances are handed to the container as a capability: the bound
    :meth:`ask_for_password` is passed uncalled and the container decides
    whether it needs a secret at all.
    """

    def __init__(self, getpass_func: Optional[Callable[[str], str]] = None):
        self.getpass_func = getpass_func or getpass.getpass

    def _read(self, prompt: str) -> str:
        try:
            return self.getpass_func(prompt)
        except EOFError as exc:
            raise PromptError("Could not read the password: no input available.") from exc
        except OSError as exc:
            raise PromptError(f"Could not read the password: {exc}") from exc

    def ask_for_password(self) -> bytes:
        return self._read(PASSWORD_PROMPT).encode("utf-8")

    def ask_for_new_password(self) -> bytes:
        password = self._read(PASSWORD_PROMPT)
        if not password:
            raise PromptError("The password must not be empty.")
        if self._read(REPEAT_PASSWORD_PROMPT) != password:
            raise PromptError("The passwords do not match.")
        return password.encode("utf-8")


def ask_for_password() -> bytes:
    return PasswordPrompt().ask_for_password()
