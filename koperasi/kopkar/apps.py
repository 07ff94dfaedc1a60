from django.apps import AppConfig


class KopkarConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'kopkar'
    verbose_name = 'Koperasi (Anggota • Simpan • Pinjam • Payroll)'
