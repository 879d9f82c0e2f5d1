"""
Initial migration for StockLedger models.
"""

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create StockLedger models: InventoryItem."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(help_text='Identificador único, imutável após o cadastro', max_length=64, unique=True, verbose_name='SKU')),
                ('product_id', models.CharField(blank=True, default='', max_length=64, verbose_name='ID do Produto')),
                ('variant_id', models.CharField(blank=True, default='', max_length=64, verbose_name='ID da Variante')),
                ('current_stock', models.PositiveIntegerField(default=0, verbose_name='Estoque atual')),
                ('reserved_stock', models.PositiveIntegerField(default=0, verbose_name='Reservado')),
                ('available_stock', models.PositiveIntegerField(default=0, verbose_name='Disponível')),
                ('min_stock_level', models.PositiveIntegerField(default=10, verbose_name='Estoque mínimo')),
                ('max_stock_level', models.PositiveIntegerField(default=1000, verbose_name='Estoque máximo')),
                ('reorder_point', models.PositiveIntegerField(default=20, verbose_name='Ponto de pedido')),
                ('reorder_quantity', models.PositiveIntegerField(default=50, verbose_name='Quantidade de reposição')),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, verbose_name='Custo')),
                ('selling_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, verbose_name='Preço de venda')),
                ('supplier', models.JSONField(blank=True, default=dict, verbose_name='Fornecedor')),
                ('location', models.JSONField(blank=True, default=dict, verbose_name='Localização')),
                ('status', models.CharField(choices=[('active', 'Ativo'), ('inactive', 'Inativo'), ('discontinued', 'Descontinuado')], db_index=True, default='active', max_length=20, verbose_name='Status')),
                ('movements', models.JSONField(blank=True, default=list, verbose_name='Movimentos')),
                ('alerts', models.JSONField(blank=True, default=list, verbose_name='Alertas')),
                ('last_restocked', models.DateTimeField(blank=True, null=True, verbose_name='Última reposição')),
                ('last_sold', models.DateTimeField(blank=True, null=True, verbose_name='Última venda')),
                ('version', models.PositiveIntegerField(default=0, verbose_name='Versão')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Criado em')),
                ('updated_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Atualizado em')),
            ],
            options={
                'verbose_name': 'Item de Estoque',
                'verbose_name_plural': 'Itens de Estoque',
                'ordering': ['-updated_at'],
                'indexes': [models.Index(fields=['status', 'current_stock'], name='stockledger_status_stock_idx')],
            },
        ),
    ]
