# views/employee_view.py
from rest_framework import serializers, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import EmployeeImportSerializer, EmployeeReadSerializer, EmployeeWriteSerializer
from kopkar.services import employee_service
from kopkar.selectors.admin_selector import filter_employees, get_employee_by_id

from .utils import (
    AdminAPIView, CONFLICT, OpenApiResponse, OpenApiTypes, PAGE_PARAMS, csv_response, extend_schema,
    extend_schema_view, inline_serializer, not_found, paginate, path_int, q_int, q_str, std_errors,
)

EMPLOYEE_FILTERS = PAGE_PARAMS + [
    q_str("search", "Nomor karyawan / nama"),
    q_int("departmentId", "Department"),
    q_int("golonganId", "Golongan"),
    q_str("employeeType", "TETAP | KONTRAK"),
    q_str("isActive", "true | false"),
]
EMPLOYEE_SORT = ("created_at", "employee_number", "full_name", "permanent_employee_date")

ImportResultSerializer = inline_serializer(
    name="EmployeeImportResult",
    fields={
        "success": serializers.IntegerField(),
        "failed": serializers.IntegerField(),
        "errors": serializers.ListField(child=serializers.DictField()),
    },
)


@extend_schema_view(
    get=extend_schema(
        tags=["Employee"],
        summary="Daftar karyawan",
        parameters=EMPLOYEE_FILTERS,
        responses={200: EmployeeReadSerializer(many=True), **std_errors()},
    ),
    post=extend_schema(
        tags=["Employee"],
        summary="Tambah karyawan",
        request=EmployeeWriteSerializer,
        responses={201: OpenApiResponse(EmployeeReadSerializer), **std_errors(CONFLICT)},
    ),
)
class EmployeeListCreateView(AdminAPIView):
    def get(self, request):
        return paginate(self, filter_employees(request.query_params), EmployeeReadSerializer, EMPLOYEE_SORT,
                        {"name": "full_name", "number": "employee_number"})

    def post(self, request):
        ser = EmployeeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        emp = employee_service.create_employee(ser.validated_data)
        return Response(EmployeeReadSerializer(emp).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=["Employee"],
        summary="Detail karyawan",
        parameters=[path_int("pk", "ID karyawan")],
        responses={200: OpenApiResponse(EmployeeReadSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["Employee"],
        summary="Ubah karyawan (sebagian)",
        parameters=[path_int("pk", "ID karyawan")],
        request=EmployeeWriteSerializer,
        responses={200: OpenApiResponse(EmployeeReadSerializer), **std_errors(CONFLICT)},
    ),
    delete=extend_schema(
        tags=["Employee"],
        summary="Hapus karyawan",
        description="Karyawan yang sudah punya akun user tidak bisa dihapus.",
        parameters=[path_int("pk", "ID karyawan")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class EmployeeDetailView(AdminAPIView):
    def get(self, request, pk: int):
        emp = get_employee_by_id(pk)
        if not emp:
            return not_found("Karyawan")
        return Response(EmployeeReadSerializer(emp).data)

    def put(self, request, pk: int):
        emp = get_employee_by_id(pk)
        if not emp:
            return not_found("Karyawan")
        ser = EmployeeWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return Response(EmployeeReadSerializer(employee_service.update_employee(emp, ser.validated_data)).data)

    def delete(self, request, pk: int):
        emp = get_employee_by_id(pk)
        if not emp:
            return not_found("Karyawan")
        employee_service.delete_employee(emp)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=["Employee"],
    summary="Aktifkan / nonaktifkan karyawan",
    parameters=[path_int("pk", "ID karyawan")],
    request=None,
    responses={200: EmployeeReadSerializer, **std_errors()},
)
class EmployeeToggleActiveView(AdminAPIView):
    def post(self, request, pk: int):
        emp = get_employee_by_id(pk)
        if not emp:
            return not_found("Karyawan")
        return Response(EmployeeReadSerializer(employee_service.toggle_active(emp)).data)


class EmployeeImportView(AdminAPIView):
    """
    Import CSV (multipart, field `file`):
      employee_number, full_name, department, golongan, employee_type, is_active
    Setiap baris disimpan terpisah berdasarkan employee_number (tambah atau perbarui).
    """
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(
        tags=["Employee"],
        summary="Impor karyawan dari CSV",
        request={"multipart/form-data": EmployeeImportSerializer},
        responses={200: ImportResultSerializer, **std_errors()},
    )
    def post(self, request):
        ser = EmployeeImportSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(employee_service.import_csv(ser.validated_data["file"].read()))


class EmployeeExportView(AdminAPIView):
    @extend_schema(
        tags=["Employee"],
        summary="Ekspor karyawan ke CSV (sesuai filter)",
        parameters=EMPLOYEE_FILTERS[4:],
        responses={(200, "text/csv"): OpenApiTypes.STR, **std_errors()},
    )
    def get(self, request):
        qs = filter_employees(request.query_params).order_by("employee_number")
        return csv_response(employee_service.csv_rows(qs), "employees.csv")
