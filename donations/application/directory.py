from donations.domain.exceptions import AccountNotFound
from donations.models import Account


class AccountDirectory:
    """Read-only lookup of externally provisioned player accounts."""

    def get(self, account_id):
        try:
            return Account.objects.get(aid=account_id)
        except Account.DoesNotExist:
            raise AccountNotFound(account_id)

    def exists(self, account_id):
        return Account.objects.filter(aid=account_id).exists()
