"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (epscampanhas.core.entities)
"""
from typing import Any, Optional, Type

from django.apps import apps
from django.db import models

from epscampanhas.core.entities import (
    Usuario as UsuarioEntity,
    Campanha as CampanhaEntity,
    MetaCampanha as MetaCampanhaEntity,
    KitCampanha as KitCampanhaEntity,
    Submissao as SubmissaoEntity,
    Ganho as GanhoEntity,
    Premio as PremioEntity,
    ResgatePremio as ResgatePremioEntity,
    Notificacao as NotificacaoEntity,
    Atividade as AtividadeEntity,
    JobValidacao as JobValidacaoEntity,
)


def get_model(model_name: str):
    """Retorna um modelo da infraestrutura de forma segura (lazy loading)."""
    return apps.get_model('infrastructure', model_name)


def _id(valor) -> Optional[str]:
    return str(valor) if valor is not None else None


class BaseMapper:
    model_name: str = ''

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model(cls.model_name)


# ====================================================================
# USUÁRIO
# ====================================================================

class UsuarioMapper(BaseMapper):
    model_name = 'Usuario'

    @staticmethod
    def to_entity(model: Any) -> Optional[UsuarioEntity]:
        if not model:
            return None
        return UsuarioEntity(
            id=str(model.id),
            nome=model.nome,
            email=model.email,
            papel=model.papel,
            status=model.status,
            cpf=model.cpf,
            whatsapp=model.whatsapp,
            avatar_url=model.avatar_url,
            gerente_id=_id(model.gerente_id),
            nome_otica=model.nome_otica,
            cnpj_otica=model.cnpj_otica,
            nivel=model.nivel,
            pontos=model.pontos,
            data_criacao=model.data_criacao,
        )

    @classmethod
    def to_model(cls, entity: UsuarioEntity, model: Optional[Any] = None) -> Any:
        """Copia os campos de perfil. Pontos só mudam por incremento atômico no repositório."""
        if not model:
            model = cls.model_class()(id=entity.id, pontos=entity.pontos)
        model.nome = entity.nome
        model.email = entity.email
        model.papel = entity.papel
        model.status = entity.status
        model.cpf = entity.cpf
        model.whatsapp = entity.whatsapp
        model.avatar_url = entity.avatar_url
        model.gerente_id = entity.gerente_id
        model.nome_otica = entity.nome_otica
        model.cnpj_otica = entity.cnpj_otica
        model.nivel = entity.nivel
        # Usuário bloqueado também fica inativo para o Django (admin e autenticação padrão)
        model.is_active = entity.status == model.Status.ATIVO
        model.is_staff = entity.papel == model.Papel.ADMIN
        return model


# ====================================================================
# CAMPANHAS
# ====================================================================

class MetaCampanhaMapper(BaseMapper):
    model_name = 'MetaCampanha'

    @staticmethod
    def to_entity(model: Any) -> Optional[MetaCampanhaEntity]:
        if not model:
            return None
        return MetaCampanhaEntity(
            id=str(model.id),
            campanha_id=_id(model.campanha_id),
            descricao=model.descricao,
            quantidade=model.quantidade,
            tipo_unidade=model.tipo_unidade,
        )

    @classmethod
    def to_model(cls, entity: MetaCampanhaEntity, campanha_id: str) -> Any:
        return cls.model_class()(
            id=entity.id,
            campanha_id=campanha_id,
            descricao=entity.descricao,
            quantidade=entity.quantidade,
            tipo_unidade=entity.tipo_unidade,
        )


class CampanhaMapper(BaseMapper):
    model_name = 'Campanha'

    @staticmethod
    def to_entity(model: Any) -> Optional[CampanhaEntity]:
        """As metas vêm do prefetch 'metas' quando disponível."""
        if not model:
            return None
        return CampanhaEntity(
            id=str(model.id),
            titulo=model.titulo,
            descricao=model.descricao,
            imagem_url=model.imagem_url,
            data_inicio=model.data_inicio,
            data_fim=model.data_fim,
            pontos_por_conclusao=model.pontos_por_conclusao,
            percentual_gerente=model.percentual_gerente,
            status=model.status,
            metas=[MetaCampanhaMapper.to_entity(meta) for meta in model.metas.all()],
            data_criacao=model.data_criacao,
        )

    @classmethod
    def to_model(cls, entity: CampanhaEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.titulo = entity.titulo
        model.descricao = entity.descricao or ''
        model.imagem_url = entity.imagem_url
        model.data_inicio = entity.data_inicio
        model.data_fim = entity.data_fim
        model.pontos_por_conclusao = entity.pontos_por_conclusao
        model.percentual_gerente = entity.percentual_gerente
        model.status = entity.status
        return model


# ====================================================================
# CARTELAS E SUBMISSÕES
# ====================================================================

class SubmissaoMapper(BaseMapper):
    model_name = 'Submissao'

    @staticmethod
    def to_entity(model: Any) -> Optional[SubmissaoEntity]:
        """Preenche os dados desnormalizados quando as relações foram carregadas com select_related."""
        if not model:
            return None
        usuario = model.usuario if 'usuario' in model._state.fields_cache else None
        campanha = model.campanha if 'campanha' in model._state.fields_cache else None
        meta = model.meta if 'meta' in model._state.fields_cache else None
        return SubmissaoEntity(
            id=str(model.id),
            numero_pedido=model.numero_pedido,
            quantidade=model.quantidade,
            status=model.status,
            campanha_id=_id(model.campanha_id),
            meta_id=_id(model.meta_id),
            kit_id=_id(model.kit_id),
            usuario_id=_id(model.usuario_id),
            observacoes=model.observacoes,
            mensagem_validacao=model.mensagem_validacao,
            validado_por_id=_id(model.validado_por_id),
            data_submissao=model.data_submissao,
            data_validacao=model.data_validacao,
            usuario_nome=usuario.nome if usuario else None,
            usuario_gerente_id=_id(usuario.gerente_id) if usuario else None,
            campanha_titulo=campanha.titulo if campanha else None,
            meta_descricao=meta.descricao if meta else None,
        )

    @classmethod
    def to_model(cls, entity: SubmissaoEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id, data_submissao=entity.data_submissao)
        model.numero_pedido = entity.numero_pedido
        model.quantidade = entity.quantidade
        model.status = entity.status
        model.campanha_id = entity.campanha_id
        model.meta_id = entity.meta_id
        model.kit_id = entity.kit_id
        model.usuario_id = entity.usuario_id
        model.observacoes = entity.observacoes
        model.mensagem_validacao = entity.mensagem_validacao
        model.validado_por_id = entity.validado_por_id
        model.data_validacao = entity.data_validacao
        return model


class KitCampanhaMapper(BaseMapper):
    model_name = 'KitCampanha'

    @staticmethod
    def to_entity(model: Any) -> Optional[KitCampanhaEntity]:
        if not model:
            return None
        return KitCampanhaEntity(
            id=str(model.id),
            campanha_id=_id(model.campanha_id),
            usuario_id=_id(model.usuario_id),
            status=model.status,
            data_conclusao=model.data_conclusao,
            data_criacao=model.data_criacao,
            submissoes=[SubmissaoMapper.to_entity(s) for s in model.submissoes.all()],
        )


# ====================================================================
# GANHOS E PRÊMIOS
# ====================================================================

class GanhoMapper(BaseMapper):
    model_name = 'Ganho'

    @staticmethod
    def to_entity(model: Any) -> Optional[GanhoEntity]:
        if not model:
            return None
        return GanhoEntity(
            id=str(model.id),
            tipo=model.tipo,
            usuario_id=_id(model.usuario_id),
            usuario_nome=model.usuario_nome,
            usuario_avatar_url=model.usuario_avatar_url,
            campanha_id=_id(model.campanha_id),
            campanha_titulo=model.campanha_titulo,
            kit_id=_id(model.kit_id),
            nome_usuario_origem=model.nome_usuario_origem,
            valor=model.valor,
            descricao=model.descricao,
            status=model.status,
            data_ganho=model.data_ganho,
            data_pagamento=model.data_pagamento,
        )

    @classmethod
    def to_model(cls, entity: GanhoEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id, data_ganho=entity.data_ganho)
        model.tipo = entity.tipo
        model.usuario_id = entity.usuario_id
        model.usuario_nome = entity.usuario_nome or ''
        model.usuario_avatar_url = entity.usuario_avatar_url
        model.campanha_id = entity.campanha_id
        model.campanha_titulo = entity.campanha_titulo
        model.kit_id = entity.kit_id
        model.nome_usuario_origem = entity.nome_usuario_origem
        model.valor = entity.valor
        model.descricao = entity.descricao
        model.status = entity.status
        model.data_pagamento = entity.data_pagamento
        return model


class PremioMapper(BaseMapper):
    model_name = 'Premio'

    @staticmethod
    def to_entity(model: Any) -> Optional[PremioEntity]:
        if not model:
            return None
        return PremioEntity(
            id=str(model.id),
            titulo=model.titulo,
            descricao=model.descricao,
            imagem_url=model.imagem_url,
            pontos_necessarios=model.pontos_necessarios,
            estoque=model.estoque,
            categoria=model.categoria,
            prioridade=model.prioridade,
            ativo=model.ativo,
            data_criacao=model.data_criacao,
        )

    @classmethod
    def to_model(cls, entity: PremioEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.titulo = entity.titulo
        model.descricao = entity.descricao or ''
        model.imagem_url = entity.imagem_url
        model.pontos_necessarios = entity.pontos_necessarios
        model.estoque = entity.estoque
        model.categoria = entity.categoria
        model.prioridade = entity.prioridade
        model.ativo = entity.ativo
        return model


class ResgatePremioMapper(BaseMapper):
    model_name = 'ResgatePremio'

    @staticmethod
    def to_entity(model: Any) -> Optional[ResgatePremioEntity]:
        if not model:
            return None
        premio = model.premio if 'premio' in model._state.fields_cache else None
        usuario = model.usuario if 'usuario' in model._state.fields_cache else None
        return ResgatePremioEntity(
            id=str(model.id),
            premio_id=_id(model.premio_id),
            usuario_id=_id(model.usuario_id),
            pontos_resgatados=model.pontos_resgatados,
            status=model.status,
            data_resgate=model.data_resgate,
            premio_titulo=premio.titulo if premio else None,
            usuario_nome=usuario.nome if usuario else None,
        )


# ====================================================================
# NOTIFICAÇÕES, ATIVIDADES E JOBS
# ====================================================================

class NotificacaoMapper(BaseMapper):
    model_name = 'Notificacao'

    @staticmethod
    def to_entity(model: Any) -> Optional[NotificacaoEntity]:
        if not model:
            return None
        return NotificacaoEntity(
            id=str(model.id),
            usuario_id=_id(model.usuario_id),
            titulo=model.titulo,
            mensagem=model.mensagem,
            tipo=model.tipo,
            lida=model.lida,
            metadados=model.metadados,
            data_criacao=model.data_criacao,
        )


class AtividadeMapper(BaseMapper):
    model_name = 'Atividade'

    @staticmethod
    def to_entity(model: Any) -> Optional[AtividadeEntity]:
        if not model:
            return None
        return AtividadeEntity(
            id=str(model.id),
            usuario_id=_id(model.usuario_id),
            tipo=model.tipo,
            descricao=model.descricao,
            pontos=model.pontos,
            valor=model.valor,
            metadados=model.metadados,
            data=model.data,
        )


class JobValidacaoMapper(BaseMapper):
    model_name = 'JobValidacao'

    @staticmethod
    def to_entity(model: Any) -> Optional[JobValidacaoEntity]:
        if not model:
            return None
        return JobValidacaoEntity(
            id=str(model.id),
            nome_arquivo=model.nome_arquivo,
            admin_id=_id(model.admin_id),
            campanha_id=_id(model.campanha_id),
            titulo_campanha=model.titulo_campanha,
            simulacao=model.simulacao,
            status=model.status,
            total_linhas=model.total_linhas,
            vendas_validadas=model.vendas_validadas,
            erros=model.erros,
            avisos=model.avisos,
            pontos_distribuidos=model.pontos_distribuidos,
            detalhes=model.detalhes or [],
            configuracao=model.configuracao or {},
            tamanho_arquivo=model.tamanho_arquivo,
            inicio_processamento=model.inicio_processamento,
            fim_processamento=model.fim_processamento,
            duracao_ms=model.duracao_ms,
            data_upload=model.data_upload,
        )

    @classmethod
    def to_model(cls, entity: JobValidacaoEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id, data_upload=entity.data_upload)
        model.nome_arquivo = entity.nome_arquivo
        model.admin_id = entity.admin_id
        model.campanha_id = entity.campanha_id
        model.titulo_campanha = entity.titulo_campanha
        model.simulacao = entity.simulacao
        model.status = entity.status
        model.total_linhas = entity.total_linhas
        model.vendas_validadas = entity.vendas_validadas
        model.erros = entity.erros
        model.avisos = entity.avisos
        model.pontos_distribuidos = entity.pontos_distribuidos
        model.detalhes = entity.detalhes
        model.configuracao = entity.configuracao
        model.tamanho_arquivo = entity.tamanho_arquivo
        model.inicio_processamento = entity.inicio_processamento
        model.fim_processamento = entity.fim_processamento
        model.duracao_ms = entity.duracao_ms
        return model
