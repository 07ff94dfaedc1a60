# views/department_view.py
from rest_framework import status
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import DepartmentSerializer
from kopkar.services.department_service import create_department, update_department, delete_department
from kopkar.selectors.admin_selector import list_departments, get_department_by_id

from .utils import (
    AdminAPIView, CONFLICT, OpenApiResponse, extend_schema, extend_schema_view, not_found,
    path_int, q_str, std_errors,
)

# -----------------------------
# /api/departments/  (list + create)
# -----------------------------
@extend_schema_view(
    get=extend_schema(
        tags=["Department"],
        summary="Daftar department",
        parameters=[q_str("search", "Nama department"), q_str("activeOnly", "true = hanya department yang aktif")],
        responses=OpenApiResponse(DepartmentSerializer(many=True))
    ),
    post=extend_schema(
        tags=["Department"],
        summary="Tambah department",
        request=DepartmentSerializer,
        responses={201: OpenApiResponse(DepartmentSerializer), **std_errors(CONFLICT)}
    )
)
class DepartmentListCreateView(AdminAPIView):
    read_open = True

    def get(self, request):
        """
        Daftar department, diurutkan berdasarkan nama.
        """
        departments = list_departments(request.query_params)
        return Response(DepartmentSerializer(departments, many=True).data)

    def post(self, request):
        """
        Tambah department baru.
        Nama sudah ada → 409.
        """
        ser = DepartmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        dept = create_department(ser.validated_data)
        return Response(DepartmentSerializer(dept).data, status=status.HTTP_201_CREATED)


# -----------------------------
# /api/departments/<pk>/  (get + update + delete)
# -----------------------------
@extend_schema_view(
    get=extend_schema(
        tags=["Department"],
        summary="Detail department",
        parameters=[path_int("pk", "ID department")],
        responses={200: OpenApiResponse(DepartmentSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["Department"],
        summary="Ubah department (sebagian)",
        parameters=[path_int("pk", "ID department")],
        request=DepartmentSerializer,
        responses={200: OpenApiResponse(DepartmentSerializer), **std_errors(CONFLICT)},
    ),
    delete=extend_schema(
        tags=["Department"],
        summary="Hapus department",
        description="Tidak dapat dihapus selama masih ada karyawan di department ini.",
        parameters=[path_int("pk", "ID department")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class DepartmentDetailView(AdminAPIView):
    read_open = True

    def get(self, request, pk: int):
        dept = get_department_by_id(pk)
        if not dept:
            return not_found("Department")
        return Response(DepartmentSerializer(dept).data)

    def put(self, request, pk: int):
        dept = get_department_by_id(pk)
        if not dept:
            return not_found("Department")
        ser = DepartmentSerializer(dept, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        updated = update_department(dept, ser.validated_data)
        return Response(DepartmentSerializer(updated).data)

    def delete(self, request, pk: int):
        dept = get_department_by_id(pk)
        if not dept:
            return not_found("Department")
        delete_department(dept)
        return Response(status=status.HTTP_204_NO_CONTENT)
