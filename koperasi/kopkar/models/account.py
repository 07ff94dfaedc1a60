from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from .mixins import TimeStampedModel
from .core import Department, Golongan, Level


class Employee(TimeStampedModel):
    class EmployeeType(models.TextChoices):
        TETAP = "TETAP", "Karyawan tetap"
        KONTRAK = "KONTRAK", "Karyawan kontrak"

    employee_number = models.CharField(max_length=32, unique=True)
    full_name = models.CharField(max_length=150)
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name="employees")
    golongan = models.ForeignKey(Golongan, on_delete=models.SET_NULL, null=True, blank=True, related_name="employees")
    employee_type = models.CharField(max_length=16, choices=EmployeeType.choices, default=EmployeeType.TETAP)
    permanent_employee_date = models.DateField(null=True, blank=True)
    bank_account_number = models.CharField(max_length=32, blank=True, default="")
    bank_account_name = models.CharField(max_length=150, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["employee_number"]
        db_table = "Employee"

    def __str__(self):
        return f"{self.employee_number} - {self.full_name}"


class User(TimeStampedModel):
    """
    Application account. Kept apart from django.contrib.auth so the app owns
    its schema; authentication goes through kopkar.utils.auth (JWT cookies).
    """
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)

    nik = models.CharField(max_length=32, unique=True, null=True, blank=True)
    npwp = models.CharField(max_length=32, unique=True, null=True, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    birth_place = models.CharField(max_length=100, blank=True, default="")
    bank_account_number = models.CharField(max_length=32, blank=True, default="")

    employee = models.OneToOneField(Employee, on_delete=models.SET_NULL, null=True, blank=True, related_name="user")
    levels = models.ManyToManyField(Level, blank=True, related_name="users", db_table="UserLevel")

    email_verified_at = models.DateTimeField(null=True, blank=True)
    verification_token = models.CharField(max_length=128, blank=True, default="", db_index=True)
    verification_token_expires_at = models.DateTimeField(null=True, blank=True)
    reset_token = models.CharField(max_length=128, blank=True, default="", db_index=True)
    reset_token_expires_at = models.DateTimeField(null=True, blank=True)

    member_verified = models.BooleanField(default=False)
    member_verified_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["name"]
        db_table = "User"

    def __str__(self):
        return f"{self.name} <{self.email}>"

    # DRF treats any object with these attributes as a user
    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    @property
    def role_names(self) -> list:
        cached = getattr(self, "_role_names", None)
        if cached is None:
            cached = list(self.levels.values_list("level_name", flat=True))
            self._role_names = cached
        return cached

    def has_role(self, *names: str) -> bool:
        return any(n in self.role_names for n in names)

    def forget_roles(self) -> None:
        self.__dict__.pop("_role_names", None)
