# views/golongan_view.py
from rest_framework import status
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import GolonganSerializer, LoanLimitBulkSerializer, LoanLimitSerializer
from kopkar.services.golongan_service import create_golongan, update_golongan, delete_golongan, replace_limits
from kopkar.selectors.admin_selector import list_golongan, get_golongan_by_id

from .utils import AdminAPIView, CONFLICT, OpenApiResponse, extend_schema, extend_schema_view, not_found, path_int, std_errors


# /api/golongan/
@extend_schema_view(
    get=extend_schema(
        tags=["Golongan"],
        summary="Daftar golongan beserta matriks plafon",
        responses=OpenApiResponse(GolonganSerializer(many=True)),
    ),
    post=extend_schema(
        tags=["Golongan"],
        summary="Tambah golongan",
        request=GolonganSerializer,
        responses={201: OpenApiResponse(GolonganSerializer), **std_errors(CONFLICT)},
    ),
)
class GolonganListCreateView(AdminAPIView):
    read_open = True

    def get(self, request):
        return Response(GolonganSerializer(list_golongan(), many=True).data)

    def post(self, request):
        ser = GolonganSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        golongan = create_golongan(ser.validated_data)
        return Response(GolonganSerializer(golongan).data, status=status.HTTP_201_CREATED)


# /api/golongan/<pk>/
@extend_schema_view(
    get=extend_schema(
        tags=["Golongan"],
        summary="Detail golongan",
        parameters=[path_int("pk", "ID golongan")],
        responses={200: OpenApiResponse(GolonganSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["Golongan"],
        summary="Ubah golongan (sebagian)",
        parameters=[path_int("pk", "ID golongan")],
        request=GolonganSerializer,
        responses={200: OpenApiResponse(GolonganSerializer), **std_errors(CONFLICT)},
    ),
    delete=extend_schema(
        tags=["Golongan"],
        summary="Hapus golongan",
        parameters=[path_int("pk", "ID golongan")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class GolonganDetailView(AdminAPIView):
    read_open = True

    def get(self, request, pk: int):
        golongan = get_golongan_by_id(pk)
        if not golongan:
            return not_found("Golongan")
        return Response(GolonganSerializer(golongan).data)

    def put(self, request, pk: int):
        golongan = get_golongan_by_id(pk)
        if not golongan:
            return not_found("Golongan")
        ser = GolonganSerializer(golongan, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return Response(GolonganSerializer(update_golongan(golongan, ser.validated_data)).data)

    def delete(self, request, pk: int):
        golongan = get_golongan_by_id(pk)
        if not golongan:
            return not_found("Golongan")
        delete_golongan(golongan)
        return Response(status=status.HTTP_204_NO_CONTENT)


# /api/golongan/<pk>/limits/
@extend_schema_view(
    get=extend_schema(
        tags=["Golongan"],
        summary="Plafon pinjaman berdasarkan masa kerja",
        parameters=[path_int("pk", "ID golongan")],
        responses={200: LoanLimitSerializer(many=True), **std_errors()},
    ),
    put=extend_schema(
        tags=["Golongan"],
        summary="Ganti seluruh plafon golongan",
        description="Rentang masa kerja tidak boleh tumpang tindih; hanya rentang terakhir yang boleh tanpa batas atas.",
        parameters=[path_int("pk", "ID golongan")],
        request=LoanLimitBulkSerializer,
        responses={200: LoanLimitSerializer(many=True), **std_errors()},
    ),
)
class GolonganLimitView(AdminAPIView):
    read_open = True

    def get(self, request, pk: int):
        golongan = get_golongan_by_id(pk)
        if not golongan:
            return not_found("Golongan")
        return Response(LoanLimitSerializer(golongan.loan_limits.all(), many=True).data)

    def put(self, request, pk: int):
        golongan = get_golongan_by_id(pk)
        if not golongan:
            return not_found("Golongan")
        ser = LoanLimitBulkSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        limits = replace_limits(golongan, ser.validated_data["limits"])
        return Response(LoanLimitSerializer(limits, many=True).data)
