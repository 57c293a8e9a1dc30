"""
Normalização e validação de documentos brasileiros (CPF/CNPJ), e-mail e datas
usados no cadastro de usuários e no processamento de planilhas.
"""
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional


def somente_digitos(valor: Optional[str]) -> str:
    return re.sub(r"\D", "", valor or "")


def normalizar_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def cpf_valido(valor: Optional[str]) -> bool:
    cpf = somente_digitos(valor)

    if len(cpf) != 11 or cpf == cpf[0] * 11:
        return False

    for i in range(9, 11):
        total = sum(int(cpf[num]) * ((i + 1) - num) for num in range(i))
        digito = (total * 10) % 11
        digito = 0 if digito == 10 else digito

        if digito != int(cpf[i]):
            return False
    return True


def cnpj_valido(valor: Optional[str]) -> bool:
    cnpj = somente_digitos(valor)

    if len(cnpj) != 14 or cnpj == cnpj[0] * 14:
        return False

    pesos_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    pesos_2 = [6] + pesos_1

    for pesos, pos in ((pesos_1, 12), (pesos_2, 13)):
        total = sum(int(cnpj[i]) * pesos[i] for i in range(len(pesos)))
        digito = 11 - (total % 11)
        digito = 0 if digito >= 10 else digito

        if digito != int(cnpj[pos]):
            return False
    return True


def formatar_cpf(valor: Optional[str]) -> str:
    cpf = somente_digitos(valor)
    if len(cpf) != 11:
        return valor or ""
    return f"{cpf[:3]}.{cpf[3:6]}.{cpf[6:9]}-{cpf[9:]}"


def formatar_cnpj(valor: Optional[str]) -> str:
    cnpj = somente_digitos(valor)
    if len(cnpj) != 14:
        return valor or ""
    return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:12]}-{cnpj[12:]}"


FORMATOS_DATA = ('%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y', '%Y/%m/%d', '%Y-%m-%dT%H:%M:%S', '%d/%m/%Y %H:%M')


def interpretar_data(valor: Optional[str]) -> Optional[datetime]:
    """Tenta interpretar uma data nos formatos comuns de planilhas brasileiras."""
    texto = (valor or "").strip()
    if not texto:
        return None
    for formato in FORMATOS_DATA:
        try:
            return datetime.strptime(texto, formato)
        except ValueError:
            continue
    return None


def interpretar_valor(valor) -> Decimal:
    """Converte '1.234,56', 'R$ 99,90' ou '99.90' em Decimal. Valores ilegíveis viram zero."""
    texto = re.sub(r"[^0-9.,-]", "", str(valor or ""))
    if not texto:
        return Decimal('0')
    if ',' in texto:
        texto = texto.replace('.', '').replace(',', '.')
    try:
        return Decimal(texto)
    except InvalidOperation:
        return Decimal('0')
