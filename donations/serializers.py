from rest_framework import serializers

from donations.models import Account, Donation


class AccountSerializer(serializers.ModelSerializer):
    accountId = serializers.IntegerField(source="aid")
    displayName = serializers.CharField(source="username")

    class Meta:
        model = Account
        fields = ["accountId", "displayName", "coins", "money"]


class PendingDonationSerializer(serializers.ModelSerializer):
    """Wire shape of a queue entry as the game server reads it."""

    accountId = serializers.IntegerField(source="account_id")
    coinsReward = serializers.IntegerField(source="coins_reward")
    moneyReward = serializers.IntegerField(source="money_reward")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Donation
        fields = ["id", "accountId", "kind", "coinsReward", "moneyReward", "createdAt"]
