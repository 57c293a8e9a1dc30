from rest_framework import serializers

from epscampanhas.core.entities import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio, ResgatePremio, Notificacao,
    Atividade, JobValidacao, ProgressoKit, ProgressoMeta, Pagina,
    PapelUsuario, StatusUsuario, StatusCampanha, TipoUnidade, StatusSubmissao, TipoGanho, StatusGanho,
)


# ====================================================================
# SERIALIZERS DE SAÍDA (Entidades da Core -> JSON)
# ====================================================================

class UsuarioSerializer(serializers.Serializer):
    id = serializers.CharField()
    nome = serializers.CharField()
    email = serializers.EmailField()
    papel = serializers.CharField()
    status = serializers.CharField()
    cpf = serializers.CharField(allow_null=True)
    whatsapp = serializers.CharField(allow_null=True)
    avatar_url = serializers.CharField(allow_null=True)
    gerente_id = serializers.CharField(allow_null=True)
    nome_otica = serializers.CharField(allow_null=True)
    cnpj_otica = serializers.CharField(allow_null=True)
    nivel = serializers.CharField(allow_null=True)
    pontos = serializers.IntegerField()
    data_criacao = serializers.DateTimeField()


class MetaCampanhaSerializer(serializers.Serializer):
    id = serializers.CharField()
    descricao = serializers.CharField()
    quantidade = serializers.IntegerField()
    tipo_unidade = serializers.CharField()


class CampanhaSerializer(serializers.Serializer):
    id = serializers.CharField()
    titulo = serializers.CharField()
    descricao = serializers.CharField()
    imagem_url = serializers.CharField(allow_null=True)
    data_inicio = serializers.DateTimeField()
    data_fim = serializers.DateTimeField()
    pontos_por_conclusao = serializers.IntegerField()
    percentual_gerente = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    status = serializers.CharField()
    metas = MetaCampanhaSerializer(many=True)
    data_criacao = serializers.DateTimeField()


class SubmissaoSerializer(serializers.Serializer):
    id = serializers.CharField()
    numero_pedido = serializers.CharField()
    quantidade = serializers.IntegerField()
    status = serializers.CharField()
    campanha_id = serializers.CharField()
    campanha_titulo = serializers.CharField(allow_null=True)
    meta_id = serializers.CharField()
    meta_descricao = serializers.CharField(allow_null=True)
    kit_id = serializers.CharField(allow_null=True)
    usuario_id = serializers.CharField()
    usuario_nome = serializers.CharField(allow_null=True)
    observacoes = serializers.CharField(allow_null=True)
    mensagem_validacao = serializers.CharField(allow_null=True)
    validado_por_id = serializers.CharField(allow_null=True)
    data_submissao = serializers.DateTimeField()
    data_validacao = serializers.DateTimeField(allow_null=True)


class KitCampanhaSerializer(serializers.Serializer):
    id = serializers.CharField()
    campanha_id = serializers.CharField()
    usuario_id = serializers.CharField()
    status = serializers.CharField()
    data_conclusao = serializers.DateTimeField(allow_null=True)
    data_criacao = serializers.DateTimeField()
    submissoes = SubmissaoSerializer(many=True)


class ProgressoMetaSerializer(serializers.Serializer):
    meta_id = serializers.CharField()
    descricao = serializers.CharField()
    atual = serializers.IntegerField()
    alvo = serializers.IntegerField()
    progresso = serializers.IntegerField()
    concluida = serializers.BooleanField()


class ProgressoKitSerializer(serializers.Serializer):
    progresso_geral = serializers.IntegerField()
    metas = ProgressoMetaSerializer(many=True)


class GanhoSerializer(serializers.Serializer):
    id = serializers.CharField()
    tipo = serializers.CharField()
    usuario_id = serializers.CharField()
    usuario_nome = serializers.CharField(allow_null=True)
    usuario_avatar_url = serializers.CharField(allow_null=True)
    campanha_id = serializers.CharField(allow_null=True)
    campanha_titulo = serializers.CharField(allow_null=True)
    kit_id = serializers.CharField(allow_null=True)
    nome_usuario_origem = serializers.CharField(allow_null=True)
    valor = serializers.DecimalField(max_digits=12, decimal_places=2)
    descricao = serializers.CharField()
    status = serializers.CharField()
    data_ganho = serializers.DateTimeField()
    data_pagamento = serializers.DateTimeField(allow_null=True)


class PremioSerializer(serializers.Serializer):
    id = serializers.CharField()
    titulo = serializers.CharField()
    descricao = serializers.CharField()
    imagem_url = serializers.CharField(allow_null=True)
    pontos_necessarios = serializers.IntegerField()
    estoque = serializers.IntegerField()
    categoria = serializers.CharField(allow_null=True)
    prioridade = serializers.IntegerField()
    ativo = serializers.BooleanField()
    disponivel = serializers.BooleanField()
    data_criacao = serializers.DateTimeField()


class ResgatePremioSerializer(serializers.Serializer):
    id = serializers.CharField()
    premio_id = serializers.CharField()
    premio_titulo = serializers.CharField(allow_null=True)
    usuario_id = serializers.CharField()
    usuario_nome = serializers.CharField(allow_null=True)
    pontos_resgatados = serializers.IntegerField()
    status = serializers.CharField()
    data_resgate = serializers.DateTimeField()


class NotificacaoSerializer(serializers.Serializer):
    id = serializers.CharField()
    usuario_id = serializers.CharField()
    titulo = serializers.CharField()
    mensagem = serializers.CharField()
    tipo = serializers.CharField()
    lida = serializers.BooleanField()
    metadados = serializers.JSONField(allow_null=True)
    data_criacao = serializers.DateTimeField()


class AtividadeSerializer(serializers.Serializer):
    id = serializers.CharField()
    usuario_id = serializers.CharField()
    tipo = serializers.CharField()
    descricao = serializers.CharField()
    pontos = serializers.IntegerField(allow_null=True)
    valor = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    metadados = serializers.JSONField(allow_null=True)
    data = serializers.DateTimeField()


class JobValidacaoSerializer(serializers.Serializer):
    id = serializers.CharField()
    nome_arquivo = serializers.CharField()
    admin_id = serializers.CharField(allow_null=True)
    campanha_id = serializers.CharField(allow_null=True)
    titulo_campanha = serializers.CharField()
    simulacao = serializers.BooleanField()
    status = serializers.CharField()
    total_linhas = serializers.IntegerField()
    vendas_validadas = serializers.IntegerField()
    erros = serializers.IntegerField()
    avisos = serializers.IntegerField()
    pontos_distribuidos = serializers.IntegerField()
    tamanho_arquivo = serializers.IntegerField()
    inicio_processamento = serializers.DateTimeField(allow_null=True)
    fim_processamento = serializers.DateTimeField(allow_null=True)
    duracao_ms = serializers.IntegerField(allow_null=True)
    data_upload = serializers.DateTimeField()


class JobValidacaoDetalheSerializer(JobValidacaoSerializer):
    """Inclui o resultado de cada linha e a configuração usada."""
    detalhes = serializers.JSONField()
    configuracao = serializers.JSONField()


SERIALIZADORES = {
    Usuario: UsuarioSerializer,
    Campanha: CampanhaSerializer,
    MetaCampanha: MetaCampanhaSerializer,
    KitCampanha: KitCampanhaSerializer,
    Submissao: SubmissaoSerializer,
    ProgressoKit: ProgressoKitSerializer,
    ProgressoMeta: ProgressoMetaSerializer,
    Ganho: GanhoSerializer,
    Premio: PremioSerializer,
    ResgatePremio: ResgatePremioSerializer,
    Notificacao: NotificacaoSerializer,
    Atividade: AtividadeSerializer,
    JobValidacao: JobValidacaoSerializer,
}


def serializar(valor):
    """
    Converte o retorno de um caso de uso em dados para a Response.
    Entidades usam o serializer correspondente; dicts, listas e páginas são percorridos.
    """
    serializer_class = SERIALIZADORES.get(type(valor))
    if serializer_class:
        return serializer_class(valor).data
    if isinstance(valor, Pagina):
        dados = {
            'itens': serializar(valor.itens),
            'total': valor.total,
            'pagina': valor.pagina,
            'limite': valor.limite,
            'total_paginas': valor.total_paginas,
        }
        if valor.resumo is not None:
            dados['resumo'] = serializar(valor.resumo)
        return dados
    if isinstance(valor, dict):
        return {chave: serializar(item) for chave, item in valor.items()}
    if isinstance(valor, (list, tuple)):
        return [serializar(item) for item in valor]
    return valor


# ====================================================================
# SERIALIZERS DE ENTRADA (validação das requisições)
# ====================================================================

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    senha = serializers.CharField(trim_whitespace=False)


class RegistroSerializer(serializers.Serializer):
    nome = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    senha = serializers.CharField(trim_whitespace=False, write_only=True)
    cpf = serializers.CharField(max_length=14)
    papel = serializers.ChoiceField(choices=PapelUsuario.TODOS, required=False)
    gerente_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    whatsapp = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    avatar_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    nome_otica = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    cnpj_otica = serializers.CharField(max_length=18, required=False, allow_blank=True, allow_null=True)
    nivel = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)


class AlterarSenhaSerializer(serializers.Serializer):
    senha_atual = serializers.CharField(trim_whitespace=False)
    nova_senha = serializers.CharField(trim_whitespace=False)


class UsuarioAtualizacaoSerializer(serializers.Serializer):
    """Todos os campos opcionais; a Core decide o que cada papel pode alterar."""
    nome = serializers.CharField(max_length=150, required=False)
    whatsapp = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    avatar_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    email = serializers.EmailField(required=False)
    cpf = serializers.CharField(max_length=14, required=False)
    papel = serializers.ChoiceField(choices=PapelUsuario.TODOS, required=False)
    status = serializers.ChoiceField(choices=StatusUsuario.TODOS, required=False)
    gerente_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    nome_otica = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    cnpj_otica = serializers.CharField(max_length=18, required=False, allow_blank=True, allow_null=True)
    nivel = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)


class StatusUsuarioSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=StatusUsuario.TODOS)


class MetaEntradaSerializer(serializers.Serializer):
    descricao = serializers.CharField(max_length=200)
    quantidade = serializers.IntegerField(min_value=1)
    tipo_unidade = serializers.ChoiceField(choices=TipoUnidade.TODOS, default=TipoUnidade.UNIDADE)


class CampanhaEntradaSerializer(serializers.Serializer):
    titulo = serializers.CharField(max_length=200)
    descricao = serializers.CharField(required=False, allow_blank=True)
    imagem_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    data_inicio = serializers.DateTimeField()
    data_fim = serializers.DateTimeField()
    pontos_por_conclusao = serializers.IntegerField(min_value=0)
    percentual_gerente = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=StatusCampanha.TODOS, required=False)
    metas = MetaEntradaSerializer(many=True)


class StatusCampanhaSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=(StatusCampanha.ATIVA, StatusCampanha.INATIVA))


class SubmissaoEntradaSerializer(serializers.Serializer):
    numero_pedido = serializers.CharField(max_length=100)
    campanha_id = serializers.CharField()
    meta_id = serializers.CharField()
    quantidade = serializers.IntegerField(min_value=1, default=1)
    observacoes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SubmissaoAtualizacaoSerializer(serializers.Serializer):
    numero_pedido = serializers.CharField(max_length=100, required=False)
    meta_id = serializers.CharField(required=False)
    quantidade = serializers.IntegerField(min_value=1, required=False)
    observacoes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ValidacaoSubmissaoSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=(StatusSubmissao.VALIDADA, StatusSubmissao.REJEITADA))
    mensagem = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ValidacaoLoteSerializer(serializers.Serializer):
    submissao_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    acao = serializers.ChoiceField(choices=('validate', 'reject'))
    mensagem = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TransferenciaSubmissaoSerializer(serializers.Serializer):
    kit_destino_id = serializers.CharField()


class DuplicacaoSubmissaoSerializer(serializers.Serializer):
    numero_pedido = serializers.CharField(max_length=100)


class FiltrosGanhoSerializer(serializers.Serializer):
    usuario_id = serializers.CharField(required=False)
    campanha_id = serializers.CharField(required=False)
    tipo = serializers.ChoiceField(choices=TipoGanho.TODOS, required=False)
    status = serializers.ChoiceField(choices=StatusGanho.TODOS, required=False)


class PremioEntradaSerializer(serializers.Serializer):
    titulo = serializers.CharField(max_length=200)
    descricao = serializers.CharField(required=False, allow_blank=True)
    imagem_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    pontos_necessarios = serializers.IntegerField(min_value=1)
    estoque = serializers.IntegerField(min_value=0, required=False)
    categoria = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    prioridade = serializers.IntegerField(required=False)
    ativo = serializers.BooleanField(required=False)


class EstoqueSerializer(serializers.Serializer):
    quantidade = serializers.IntegerField(min_value=1)
    operacao = serializers.ChoiceField(choices=('add', 'remove'))
    motivo = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ImportacaoPremiosSerializer(serializers.Serializer):
    # Itens crus: cada um é validado pela Core com resultado individual
    premios = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class ConfiguracaoValidacaoSerializer(serializers.Serializer):
    campanha_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    simulacao = serializers.BooleanField(required=False)
    validar_cpf = serializers.BooleanField(required=False)
    validar_cnpj = serializers.BooleanField(required=False)
    validar_datas = serializers.BooleanField(required=False)
    periodo_carencia_dias = serializers.IntegerField(min_value=0, required=False)
    valor_minimo = serializers.FloatField(required=False, allow_null=True)
    valor_maximo = serializers.FloatField(required=False, allow_null=True)


class PlanilhaValidacaoSerializer(serializers.Serializer):
    """Upload multipart: mapeamentos e configuracao chegam como texto JSON."""
    arquivo = serializers.FileField()
    mapeamentos = serializers.JSONField(binary=True)
    configuracao = serializers.JSONField(binary=True, required=False)

    def validate_mapeamentos(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Informe um objeto {coluna: campo}.")
        return value

    def validate_configuracao(self, value):
        serializer = ConfiguracaoValidacaoSerializer(data=value or {})
        serializer.is_valid(raise_exception=True)
        dados = dict(serializer.validated_data)
        if not dados.get('campanha_id'):
            dados.pop('campanha_id', None)
        return dados
