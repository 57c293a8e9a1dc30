import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, List

from epscampanhas.core.entities import (
    Ganho, Campanha, Usuario, Pagina, StatusGanho, TipoGanho, TipoAtividade, agora,
)
from epscampanhas.core.exceptions import (
    UsuarioNaoEncontradoError, GanhoNaoEncontradoError, StatusInvalidoError,
    DadosInvalidosError, AcessoNegadoError,
)
from epscampanhas.core.ports import IGanhoRepository, IUsuarioRepository, IUnidadeDeTrabalho
from epscampanhas.core.use_cases.acesso import exigir_admin, normalizar_paginacao
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase

logger = logging.getLogger(__name__)


def pontos_do_valor(valor: Decimal) -> int:
    """Pontos creditados para um ganho: o valor arredondado para o inteiro mais próximo."""
    return int(Decimal(str(valor)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class CriarGanhoUseCase:
    """
    Cria um ganho e credita os pontos correspondentes ao usuário.
    Inserção, incremento de pontos e registro de atividade acontecem na mesma transação.
    """
    def __init__(
        self,
        ganho_repo: IGanhoRepository,
        usuario_repo: IUsuarioRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.ganho_repo = ganho_repo
        self.usuario_repo = usuario_repo
        self.registrar_atividade = registrar_atividade
        self.uow = uow

    def executar(
        self,
        tipo: str,
        usuario_id: str,
        valor: Decimal,
        descricao: str,
        campanha: Optional[Campanha] = None,
        kit_id: Optional[str] = None,
        nome_usuario_origem: Optional[str] = None,
    ) -> Ganho:
        if tipo not in TipoGanho.TODOS:
            raise DadosInvalidosError(f"Tipo de ganho inválido: {tipo}.")
        valor = Decimal(str(valor))
        if valor <= 0:
            raise DadosInvalidosError("O valor do ganho deve ser positivo.")

        with self.uow.atomico():
            usuario = self.usuario_repo.buscar_por_id(usuario_id)
            if not usuario:
                raise UsuarioNaoEncontradoError()

            ganho = self.ganho_repo.criar(Ganho(
                tipo=tipo,
                usuario_id=usuario.id,
                usuario_nome=usuario.nome,
                usuario_avatar_url=usuario.avatar_url,
                valor=valor,
                descricao=descricao,
                campanha_id=campanha.id if campanha else None,
                campanha_titulo=campanha.titulo if campanha else None,
                kit_id=kit_id,
                nome_usuario_origem=nome_usuario_origem,
                status=StatusGanho.PENDENTE,
            ))

            pontos = pontos_do_valor(valor)
            self.usuario_repo.incrementar_pontos(usuario.id, pontos)

            self.registrar_atividade.executar(
                usuario_id=usuario.id,
                tipo=TipoAtividade.CONQUISTA,
                descricao=f"Você ganhou {pontos} pontos: {descricao}",
                pontos=pontos,
                valor=valor,
                metadados={'ganho_id': str(ganho.id), 'tipo': tipo},
            )

        logger.info("Ganho %s (%s) de %s pontos criado para o usuário %s", ganho.id, tipo, pontos, usuario.id)
        return ganho


class GerenciarGanhosUseCase:
    """Consulta e ciclo de pagamento dos ganhos."""
    def __init__(
        self,
        ganho_repo: IGanhoRepository,
        usuario_repo: IUsuarioRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.ganho_repo = ganho_repo
        self.usuario_repo = usuario_repo
        self.registrar_atividade = registrar_atividade
        self.uow = uow

    def _escopo(self, ator: Usuario, usuario_id: Optional[str] = None) -> Dict[str, Any]:
        """Monta o filtro de usuários visível para o ator."""
        if ator.eh_admin:
            return {'usuario_id': usuario_id} if usuario_id else {}

        visiveis: List[str] = [str(ator.id)]
        if ator.eh_gerente:
            visiveis += [str(i) for i in self.usuario_repo.ids_da_equipe(ator.id)]

        if usuario_id:
            if str(usuario_id) not in visiveis:
                raise AcessoNegadoError()
            return {'usuario_id': usuario_id}
        return {'usuario_ids': visiveis}

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        filtros = dict(filtros or {})
        pagina, limite = normalizar_paginacao(pagina, limite)

        if filtros.get('tipo') and filtros['tipo'] not in TipoGanho.TODOS:
            raise DadosInvalidosError("Tipo de ganho inválido.")
        if filtros.get('status') and filtros['status'] not in StatusGanho.TODOS:
            raise DadosInvalidosError("Status de ganho inválido.")

        escopo = self._escopo(ator, filtros.pop('usuario_id', None))
        consulta = {chave: valor for chave, valor in filtros.items() if valor not in (None, '')}
        consulta.update(escopo)

        resultado = self.ganho_repo.listar(consulta, pagina, limite)
        resultado.resumo = self.ganho_repo.totais_por_status(consulta)
        return resultado

    def resumo(self, ator: Usuario) -> Dict[str, Decimal]:
        return self.ganho_repo.totais_por_status(self._escopo(ator))

    def _buscar_pendente(self, ganho_id: str, acao: str) -> Ganho:
        ganho = self.ganho_repo.buscar_por_id(ganho_id)
        if not ganho:
            raise GanhoNaoEncontradoError()
        if ganho.status != StatusGanho.PENDENTE:
            raise StatusInvalidoError(f"Apenas ganhos pendentes podem ser {acao}.")
        return ganho

    def marcar_como_pago(self, ator: Usuario, ganho_id: str) -> Ganho:
        exigir_admin(ator)
        ganho = self._buscar_pendente(ganho_id, 'pagos')
        ganho.status = StatusGanho.PAGO
        ganho.data_pagamento = agora()
        ganho = self.ganho_repo.salvar(ganho)
        logger.info("Ganho %s marcado como pago por %s", ganho.id, ator.id)
        return ganho

    def cancelar(self, ator: Usuario, ganho_id: str) -> Ganho:
        """Cancela um ganho pendente e estorna os pontos creditados."""
        exigir_admin(ator)
        with self.uow.atomico():
            ganho = self._buscar_pendente(ganho_id, 'cancelados')
            ganho.status = StatusGanho.CANCELADO
            ganho = self.ganho_repo.salvar(ganho)

            pontos = pontos_do_valor(ganho.valor)
            self.usuario_repo.incrementar_pontos(ganho.usuario_id, -pontos)
            self.registrar_atividade.executar(
                usuario_id=ganho.usuario_id,
                tipo=TipoAtividade.ADMIN_ACTION,
                descricao=f"Ganho cancelado: {ganho.descricao}",
                pontos=-pontos,
                metadados={'ganho_id': str(ganho.id), 'cancelado_por': str(ator.id)},
            )
        logger.info("Ganho %s cancelado por %s (%s pontos estornados)", ganho.id, ator.id, pontos)
        return ganho
