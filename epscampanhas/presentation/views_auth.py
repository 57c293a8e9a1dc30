# epscampanhas/presentation/views_auth.py
"""
Views de autenticação: login com JWT, cadastro público, perfil e troca de senha.
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from epscampanhas.core.dependency_injection import (
    get_autenticar_usuario_use_case, get_registrar_usuario_use_case, get_alterar_senha_use_case,
    get_gerenciar_usuarios_use_case,
)
from .autenticacao import ator
from .serializers import (
    serializar, LoginSerializer, RegistroSerializer, AlterarSenhaSerializer, UsuarioAtualizacaoSerializer,
)

logger = logging.getLogger(__name__)


class LoginAPIView(APIView):
    """
    Recebe e-mail e senha e devolve o par de tokens JWT junto com o perfil.
    Usuários bloqueados são recusados com 401.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        usuario = get_autenticar_usuario_use_case().executar(
            serializer.validated_data['email'], serializer.validated_data['senha']
        )
        refresh = RefreshToken.for_user(get_user_model().objects.get(pk=usuario.id))
        logger.info("Login do usuário %s", usuario.id)
        return Response({
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'usuario': serializar(usuario),
        })


class RegistroAPIView(APIView):
    """Cadastro público. Não é possível se registrar como administrador."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegistroSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        usuario = get_registrar_usuario_use_case().executar(dict(serializer.validated_data))
        return Response(serializar(usuario), status=status.HTTP_201_CREATED)


class MeAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(serializar(ator(request)))

    def patch(self, request):
        serializer = UsuarioAtualizacaoSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        usuario = ator(request)
        # No próprio perfil a Core aceita apenas nome, whatsapp e avatar
        atualizado = get_gerenciar_usuarios_use_case().atualizar(usuario, usuario.id, dict(serializer.validated_data))
        return Response(serializar(atualizado))


class AlterarSenhaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = AlterarSenhaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        get_alterar_senha_use_case().executar(
            ator(request), serializer.validated_data['senha_atual'], serializer.validated_data['nova_senha']
        )
        return Response({'message': "Senha alterada com sucesso."})
