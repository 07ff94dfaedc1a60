# views/user_view.py
from rest_framework import status
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import (
    RoleAssignSerializer, UserReadSerializer, UserUpdateSerializer, UserWriteSerializer,
)
from kopkar.services import user_service
from kopkar.selectors.admin_selector import filter_users, get_user_by_id

from .utils import (
    AdminAPIView, CONFLICT, OpenApiResponse, PAGE_PARAMS, extend_schema, extend_schema_view,
    not_found, paginate, path_int, q_int, q_str, std_errors,
)

USER_FILTERS = PAGE_PARAMS + [
    q_str("search", "Nama / email / NIK / nomor karyawan"),
    q_str("role", "Nama level, mis. anggota"),
    q_str("memberVerified", "true | false"),
    q_int("departmentId", "Department karyawan"),
]


@extend_schema_view(
    get=extend_schema(
        tags=["User"],
        summary="Daftar user",
        parameters=USER_FILTERS,
        responses={200: UserReadSerializer(many=True), **std_errors()},
    ),
    post=extend_schema(
        tags=["User"],
        summary="Tambah user (email dianggap terverifikasi)",
        request=UserWriteSerializer,
        responses={201: OpenApiResponse(UserReadSerializer), **std_errors(CONFLICT)},
    ),
)
class UserListCreateView(AdminAPIView):
    def get(self, request):
        return paginate(self, filter_users(request.query_params), UserReadSerializer,
                        ("created_at", "name", "email", "last_login_at"))

    def post(self, request):
        ser = UserWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = user_service.create_user(ser.validated_data, actor=request.user)
        return Response(UserReadSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=["User"],
        summary="Detail user",
        parameters=[path_int("pk", "ID user")],
        responses={200: OpenApiResponse(UserReadSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["User"],
        summary="Ubah user (sebagian)",
        parameters=[path_int("pk", "ID user")],
        request=UserUpdateSerializer,
        responses={200: OpenApiResponse(UserReadSerializer), **std_errors(CONFLICT)},
    ),
    delete=extend_schema(
        tags=["User"],
        summary="Hapus user (ketua)",
        parameters=[path_int("pk", "ID user")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class UserDetailView(AdminAPIView):
    def get(self, request, pk: int):
        user = get_user_by_id(pk)
        if not user:
            return not_found("User")
        return Response(UserReadSerializer(user).data)

    def put(self, request, pk: int):
        user = get_user_by_id(pk)
        if not user:
            return not_found("User")
        ser = UserUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        user = user_service.update_user(user, ser.validated_data, actor=request.user)
        return Response(UserReadSerializer(user).data)

    def delete(self, request, pk: int):
        user = get_user_by_id(pk)
        if not user:
            return not_found("User")
        user_service.delete_user(user, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=["User"],
    summary="Ganti seluruh level (role) user",
    parameters=[path_int("pk", "ID user")],
    request=RoleAssignSerializer,
    responses={200: UserReadSerializer, **std_errors()},
)
class UserRolesView(AdminAPIView):
    def put(self, request, pk: int):
        user = get_user_by_id(pk)
        if not user:
            return not_found("User")
        ser = RoleAssignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = user_service.assign_roles(user, ser.validated_data["roles"], actor=request.user)
        return Response(UserReadSerializer(user).data)
