from rest_framework.response import Response

from LearningHubApp.core.permissions import HasRole


class PaginationMixin:
    """Shared helper to reduce pagination boilerplate."""

    def paginate_and_respond(self, queryset, serializer_cls, many=True):
        page = self.paginate_queryset(queryset)
        serializer = serializer_cls(page if page is not None else queryset, many=many)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)


class RoleGateMixin:
    """Adds a HasRole check for actions listed in `role_rules` (action -> allowed roles)."""

    role_rules: dict[str, frozenset] = {}

    def get_permissions(self) -> list:
        perms = super().get_permissions()
        roles = self.role_rules.get(self.action)
        if roles:
            perms.append(HasRole(*roles))
        return perms
