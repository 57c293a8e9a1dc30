from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication

from epscampanhas.core.entities import Usuario, StatusUsuario
from epscampanhas.core.exceptions import UsuarioBloqueadoError
from epscampanhas.infrastructure.mappers import UsuarioMapper


class JWTAuthenticationEPS(JWTAuthentication):
    """Autenticação por token JWT que também recusa usuários bloqueados a cada requisição."""

    def get_user(self, validated_token):
        # Usuário bloqueado também fica com is_active=False, recusado pelo simplejwt como 'user_inactive'
        try:
            user = super().get_user(validated_token)
        except exceptions.AuthenticationFailed as e:
            if e.get_codes() == 'user_inactive':
                raise exceptions.AuthenticationFailed(UsuarioBloqueadoError.message, code='usuario_bloqueado')
            raise
        if user.status == StatusUsuario.BLOQUEADO:
            raise exceptions.AuthenticationFailed(UsuarioBloqueadoError.message, code='usuario_bloqueado')
        return user


def ator(request) -> Usuario:
    """Converte o usuário autenticado da requisição na entidade da Core."""
    return UsuarioMapper.to_entity(request.user)
