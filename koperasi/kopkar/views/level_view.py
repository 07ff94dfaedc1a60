# views/level_view.py
from rest_framework import status
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import LevelAssignSerializer, LevelSerializer, UserReadSerializer
from kopkar.services.level_service import assign_user, create_level, delete_level, remove_user, update_level
from kopkar.selectors.admin_selector import get_level_by_id, list_levels, users_of_level

from .utils import (
    AdminAPIView, CONFLICT, OpenApiResponse, PAGE_PARAMS, extend_schema, extend_schema_view,
    not_found, paginate, path_int, std_errors,
)


@extend_schema_view(
    get=extend_schema(tags=["Level"], summary="Daftar level (role)", responses=OpenApiResponse(LevelSerializer(many=True))),
    post=extend_schema(
        tags=["Level"],
        summary="Tambah level",
        request=LevelSerializer,
        responses={201: OpenApiResponse(LevelSerializer), **std_errors(CONFLICT)},
    ),
)
class LevelListCreateView(AdminAPIView):
    def get(self, request):
        return Response(LevelSerializer(list_levels(), many=True).data)

    def post(self, request):
        ser = LevelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(LevelSerializer(create_level(ser.validated_data)).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=["Level"],
        summary="Detail level",
        parameters=[path_int("pk", "ID level")],
        responses={200: OpenApiResponse(LevelSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["Level"],
        summary="Ubah level",
        description="Nama role sistem tidak dapat diubah.",
        parameters=[path_int("pk", "ID level")],
        request=LevelSerializer,
        responses={200: OpenApiResponse(LevelSerializer), **std_errors(CONFLICT)},
    ),
    delete=extend_schema(
        tags=["Level"],
        summary="Hapus level",
        parameters=[path_int("pk", "ID level")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class LevelDetailView(AdminAPIView):
    def get(self, request, pk: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        return Response(LevelSerializer(level).data)

    def put(self, request, pk: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        ser = LevelSerializer(level, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return Response(LevelSerializer(update_level(level, ser.validated_data)).data)

    def delete(self, request, pk: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        delete_level(level)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    get=extend_schema(
        tags=["Level"],
        summary="Daftar user pada level",
        parameters=[path_int("pk", "ID level")] + PAGE_PARAMS,
        responses={200: UserReadSerializer(many=True), **std_errors()},
    ),
    post=extend_schema(
        tags=["Level"],
        summary="Tambahkan level ke user",
        parameters=[path_int("pk", "ID level")],
        request=LevelAssignSerializer,
        responses={201: UserReadSerializer, **std_errors(CONFLICT)},
    ),
)
class LevelUsersView(AdminAPIView):
    def get(self, request, pk: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        return paginate(self, users_of_level(level.id), UserReadSerializer, ("created_at", "name", "email"))

    def post(self, request, pk: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        ser = LevelAssignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = assign_user(level, ser.validated_data["user_id"])
        return Response(UserReadSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["Level"],
    summary="Hapus level dari user",
    parameters=[path_int("pk", "ID level"), path_int("user_id", "ID user")],
    responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
)
class LevelUserRemoveView(AdminAPIView):
    def delete(self, request, pk: int, user_id: int):
        level = get_level_by_id(pk)
        if not level:
            return not_found("Level")
        remove_user(level, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
