from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('booking', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='booking',
            constraint=models.UniqueConstraint(
                condition=models.Q(('transaction_number', ''), _negated=True),
                fields=('transaction_number',),
                name='booking_unique_transaction_number',
            ),
        ),
    ]
