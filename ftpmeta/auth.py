import warnings
from dataclasses import dataclass

Username = str
Password = str
GuestKey = str


@dataclass
class Basic:
    """
    Username and password login for the control connection.

    FTP sends USER and PASS in clear text unless the connection is FTPS, so
    treat these credentials as visible to anyone on the network path when
    connecting to a plain ftp:// endpoint.

    Attributes:
        user: Account name sent with USER.
        password: Secret sent with PASS.
    """

    user: Username
    password: Password

    def __post_init__(self) -> None:
        """
        Validate login credentials.

        Raises:
            ValueError: If the username or password is blank.
        """
        if not self.user.strip():
            raise ValueError("Username cannot be empty or whitespace")

        if not self.password.strip():
            raise ValueError("Password cannot be empty or whitespace")

        if self.user.lower() == "anonymous":
            warnings.warn(
                "Basic login with the 'anonymous' account. "
                "Use Guest for anonymous access instead."
            )


@dataclass
class Guest:
    """
    Anonymous login.

    Logs in as "anonymous" and sends the key as the password. By tradition
    public servers ask for an email address there so they know who is
    fetching files.

    Attributes:
        key: Password sent with the anonymous login, usually an email address.
    """

    key: GuestKey = "anonymous@"

    def __post_init__(self) -> None:
        """
        Validate the guest key.

        Raises:
            ValueError: If the key is blank.
        """
        if not self.key.strip():
            raise ValueError("Guest key cannot be empty or whitespace")

        if "@" not in self.key:
            warnings.warn(
                "Guest key doesn't look like an email address. "
                "Some public servers reject anonymous logins without one."
            )
