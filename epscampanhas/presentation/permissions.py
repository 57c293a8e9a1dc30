from rest_framework.permissions import BasePermission

from epscampanhas.core.entities import PapelUsuario


class EhAdministrador(BasePermission):
    message = "Acesso negado. Apenas administradores podem executar esta ação."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.papel == PapelUsuario.ADMIN)


class EhGerenteOuAdministrador(BasePermission):
    message = "Acesso negado. Apenas gerentes e administradores podem executar esta ação."

    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated
            and request.user.papel in (PapelUsuario.GERENTE, PapelUsuario.ADMIN)
        )
