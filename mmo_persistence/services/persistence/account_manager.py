"""
Account login.

There is no separate registration step: logging in with a name that has no
account yet creates it with the given password. Existing accounts need the
exact password and must not be banned.
"""

from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.metrics import login_attempts_total
from mmo_persistence.models.account import Account

from .base_manager import BaseManager

logger = get_logger(__name__)


class AccountManager(BaseManager):
    async def try_login(self, name: str, password: str) -> bool:
        """
        Check credentials and record the login.

        Args:
            name: Account name
            password: Password, compared as given

        Returns:
            True if the login succeeded (or the account was just created)
        """
        if not name or not name.strip() or not password or not password.strip():
            login_attempts_total.labels(status="rejected").inc()
            return False

        now = self._utc_now()
        async with self._transaction() as tx:
            account = await tx.session.get(Account, name)
            if account is None:
                tx.session.add(
                    Account(
                        name=name,
                        password=password,
                        created=now,
                        last_login=now,
                        banned=False,
                    )
                )
                login_attempts_total.labels(status="created").inc()
                logger.info("Account created on first login", extra={"account": name})
                return True

            if account.banned:
                login_attempts_total.labels(status="rejected").inc()
                logger.warning("Login rejected - account banned", extra={"account": name})
                return False

            if account.password != password:
                login_attempts_total.labels(status="rejected").inc()
                logger.debug("Login rejected - invalid password", extra={"account": name})
                return False

            account.last_login = now
            login_attempts_total.labels(status="success").inc()
            logger.info("Login successful", extra={"account": name})
            return True
