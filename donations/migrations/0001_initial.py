import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "aid",
                    models.PositiveIntegerField(
                        db_column="AID",
                        primary_key=True,
                        serialize=False,
                        validators=[
                            django.core.validators.MinValueValidator(100000),
                            django.core.validators.MaxValueValidator(999999),
                        ],
                    ),
                ),
                ("username", models.CharField(max_length=64)),
                ("coins", models.BigIntegerField(default=0)),
                ("money", models.BigIntegerField(default=0)),
            ],
            options={
                "db_table": "users",
            },
        ),
        migrations.CreateModel(
            name="Donation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(max_length=64, unique=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("coins", "Coins"), ("money", "Money")],
                        db_column="type",
                        max_length=8,
                    ),
                ),
                ("amount", models.DecimalField(db_column="amount_gel", decimal_places=2, max_digits=10)),
                ("coins_reward", models.BigIntegerField(default=0)),
                ("money_reward", models.BigIntegerField(default=0)),
                ("processed", models.BooleanField(db_index=True, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "account",
                    models.ForeignKey(
                        db_column="aid",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="donations",
                        to="donations.account",
                    ),
                ),
            ],
            options={
                "db_table": "donations",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("coins_reward", 0), ("money_reward", 0), _connector="OR"),
                        name="donation_single_reward_kind",
                    )
                ],
            },
        ),
    ]
