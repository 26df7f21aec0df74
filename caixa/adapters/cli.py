# caixa/adapters/cli.py
"""
CLI do sistema de caixa (Typer).

Comandos principais:
- migrate                       -> aplica migrações e cria views
- params set/get/show           -> gerencia parâmetros globais
- bairros add/list/taxa/importar-> bairros atendidos e taxa de entrega
- caixa abrir/lancar/fechar/resumo
- pedido finalizar/status/ver   -> checkout do delivery (JSON)
- pdv venda/cancelar            -> vendas de balcão
- mesa ...                      -> comandas de mesa
- cashback saldo/extrato/buscar
- fluxo add/importar            -> movimentos do fluxo de caixa mensal
- rel diario/mensal/entregas/caixa
- logs                          -> últimas linhas dos arquivos de log
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from caixa.config import DB_PATH, DEFAULTS
from caixa.adapters.parsers import formata_telefone, parse_pagamentos, parse_peso_kg, parse_valor
from caixa.domain.dinheiro import formata_preco
from caixa.domain.errors import CaixaError
from caixa.domain.models import ItemVenda, Sessao
from caixa.infra.migrations import apply_migrations
from caixa.infra.views import create_views
from caixa.infra.repositories import ParamsRepo
from caixa.infra.logger import LOG_FILES, get_log_summary
from caixa.usecases import bairros as uc_bairros
from caixa.usecases import caixa as uc_caixa
from caixa.usecases import cashback as uc_cashback
from caixa.usecases import fluxo_caixa as uc_fluxo
from caixa.usecases import vendas_mesa as uc_mesa
from caixa.usecases import vendas_pdv as uc_pdv
from caixa.usecases.parametros import PARAM_KEYS, params_atuais
from caixa.usecases.pedidos import (
    atualizar_status_pedido,
    finalizar_pedido,
    obter_pedido,
    pedido_from_dict,
)
from caixa.usecases.relatorios import (
    relatorio_caixa,
    relatorio_diario,
    relatorio_entregas,
    relatorio_mensal,
)


app = typer.Typer(help="Caixa Elite: CLI")
console = Console()

DbOpt = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")
LojaOpt = typer.Option(DEFAULTS.loja_padrao, "--loja", help="ID da loja")
OperadorOpt = typer.Option(None, "--operador", help="Nome do operador")


# -----------------------
# util
# -----------------------

def _ready(db_path: str) -> None:
    apply_migrations(db_path)
    create_views(db_path)


def _fmt(val: Any) -> str:
    if isinstance(val, Decimal):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    if isinstance(val, bool):
        return "Sim" if val else "Não"
    if val is None:
        return ""
    return str(val)


def _erro(e: Exception) -> None:
    console.print(Panel(str(e), title=f"Erro: {type(e).__name__}", border_style="red"))
    raise typer.Exit(code=1)


def _display_table(data: Dict[str, Any] | List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe um dicionário (campo/valor) ou uma lista de dicionários."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    if isinstance(data, list):
        table = Table(title=title, box=box.ROUNDED)
        columns = list(data[0].keys())
        for column in columns:
            if isinstance(data[0][column], (int, Decimal)) and not isinstance(data[0][column], bool):
                table.add_column(column, justify="right")
            else:
                table.add_column(column)
        for row in data:
            table.add_row(*[_fmt(row.get(c)) for c in columns])
        console.print(table)
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Campo")
    table.add_column("Valor", justify="right")
    for chave, valor in data.items():
        if isinstance(valor, (list, dict)):
            continue
        table.add_row(chave, _fmt(valor))
    console.print(table)


def _display_report(res, title: str) -> None:
    """Exibe o retorno ``(colunas, linhas, mensagem)`` dos relatórios."""
    columns, rows, msg = res
    if rows:
        table = Table(title=title, box=box.ROUNDED)
        for i, column in enumerate(columns):
            numeric = isinstance(rows[0][i], (int, Decimal)) and not isinstance(rows[0][i], bool)
            table.add_column(column, justify="right" if numeric else "left")
        for row in rows:
            table.add_row(*[_fmt(v) for v in row])
        console.print(table)
    if msg:
        console.print(f"[dim]{msg}[/dim]")


def _load_json(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise typer.BadParameter(f"Arquivo não encontrado: {path}")
    return json.loads(p.read_text(encoding="utf-8"))


def _item_venda(d: Dict[str, Any]) -> ItemVenda:
    return ItemVenda(
        codigo=str(d.get("codigo") or ""),
        nome=d.get("nome") or "",
        quantidade=int(d.get("quantidade") or 1),
        peso_kg=parse_peso_kg(d.get("peso")) if d.get("peso") is not None else parse_valor(d.get("peso_kg")),
        preco_unitario=parse_valor(d.get("preco")),
        preco_por_grama=parse_valor(d.get("preco_grama")),
        desconto=parse_valor(d.get("desconto")) or Decimal("0"),
        observacoes=d.get("observacoes"),
    )


def _partes(partes: Optional[List[str]]):
    """``["pix=20,00", "dinheiro=10"]`` → partes do pagamento misto."""
    return parse_pagamentos([dict(zip(("forma", "valor"), p.split("=", 1))) for p in partes or []])


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = DbOpt):
    """Aplica migrações e recria as views auxiliares."""
    apply_migrations(db_path)
    create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


params_app = typer.Typer(help="Gerenciar parâmetros globais (cashback, tempo de entrega, bairros).")
app.add_typer(params_app, name="params")


@params_app.command("set")
def cmd_params_set(
    taxa_cashback: Optional[str] = typer.Option(None, help="Ex.: 0.05"),
    eta_padrao_minutos: Optional[int] = typer.Option(None, help="Tempo de entrega para bairro não cadastrado"),
    bloquear_bairro_desconhecido: Optional[bool] = typer.Option(
        None, "--bloquear-bairro-desconhecido/--aceitar-bairro-desconhecido",
        help="Recusar pedidos para bairros fora da tabela",
    ),
    db_path: str = DbOpt,
):
    """Define parâmetros globais (apenas os informados são alterados)."""
    _ready(db_path)
    items: List[tuple[str, str]] = []
    if taxa_cashback is not None:
        taxa = parse_valor(taxa_cashback)
        if taxa is None or not (0 <= taxa <= 1):
            typer.echo("Taxa de cashback deve estar entre 0 e 1.")
            raise typer.Exit(code=1)
        items.append(("taxa_cashback", str(taxa)))
    if eta_padrao_minutos is not None:
        items.append(("eta_padrao_minutos", str(eta_padrao_minutos)))
    if bloquear_bairro_desconhecido is not None:
        items.append(("bloquear_bairro_desconhecido", "1" if bloquear_bairro_desconhecido else "0"))
    if not items:
        typer.echo("Nada a alterar. Informe pelo menos um parâmetro.")
        raise typer.Exit(code=1)
    ParamsRepo(db_path).set_many(items)
    typer.echo(">> Parâmetros atualizados.")


@params_app.command("get")
def cmd_params_get(
    chave: str = typer.Argument(..., help="Ex.: " + " | ".join(PARAM_KEYS)),
    db_path: str = DbOpt,
):
    """Mostra um parâmetro específico."""
    _ready(db_path)
    val = ParamsRepo(db_path).get(chave)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(db_path: str = DbOpt):
    """Exibe os parâmetros efetivos (com fallback para defaults)."""
    _ready(db_path)
    atuais = params_atuais(db_path)
    table = Table(title="Parâmetros do Sistema")
    table.add_column("Parâmetro")
    table.add_column("Valor Atual")
    table.add_column("Valor Padrão")
    for k in PARAM_KEYS:
        table.add_row(k, atuais[k], str(getattr(DEFAULTS, k)))
    console.print(table)
    console.print(f"[dim]Banco de dados: {db_path}[/dim]")


# -----------------------
# bairros
# -----------------------

bairros_app = typer.Typer(help="Bairros atendidos e taxas de entrega")
app.add_typer(bairros_app, name="bairros")


@bairros_app.command("add")
def cmd_bairro_add(
    nome: str = typer.Argument(...),
    taxa: str = typer.Argument(..., help="Taxa de entrega (ex.: 5,00)"),
    tempo: Optional[int] = typer.Option(None, help="Tempo de entrega em minutos"),
    inativo: bool = typer.Option(False, "--inativo", help="Cadastrar sem atender"),
    db_path: str = DbOpt,
):
    """Cadastra ou atualiza um bairro."""
    _ready(db_path)
    try:
        row = uc_bairros.cadastrar_bairro(nome, parse_valor(taxa), tempo, not inativo, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(row, title="Bairro Cadastrado")


@bairros_app.command("list")
def cmd_bairro_list(
    ativos: bool = typer.Option(False, "--ativos", help="Somente bairros atendidos"),
    db_path: str = DbOpt,
):
    _ready(db_path)
    rows = uc_bairros.listar_bairros(apenas_ativos=ativos, db_path=db_path)
    for r in rows:
        r["taxa_entrega"] = Decimal(r["taxa_entrega"])
        r["ativo"] = bool(r["ativo"])
    _display_table(rows, title="Bairros")


@bairros_app.command("taxa")
def cmd_bairro_taxa(nome: str = typer.Argument(...), db_path: str = DbOpt):
    """Mostra a taxa e o tempo de entrega que seriam aplicados ao bairro."""
    _ready(db_path)
    try:
        t = uc_bairros.consultar_taxa(nome, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table({"bairro": nome, "taxa": t.taxa, "eta_minutos": t.eta_minutos, "cadastrado": t.encontrado},
                   title="Taxa de Entrega")


@bairros_app.command("importar")
def cmd_bairro_importar(
    path: str = typer.Argument(..., help="Planilha XLSX/CSV de bairros"),
    db_path: str = DbOpt,
):
    """Importa bairros em lote a partir de uma planilha."""
    _ready(db_path)
    try:
        info = uc_bairros.importar_bairros(path, db_path=db_path)
    except (CaixaError, FileNotFoundError) as e:
        _erro(e)
    _display_table(info, title="Importação de Bairros")


# -----------------------
# caixa
# -----------------------

caixa_app = typer.Typer(help="Abertura, lançamentos e fechamento do caixa")
app.add_typer(caixa_app, name="caixa")


@caixa_app.command("abrir")
def cmd_caixa_abrir(
    valor: str = typer.Argument(..., help="Valor de abertura (troco inicial)"),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = uc_caixa.abrir_caixa(parse_valor(valor), Sessao(loja, operador), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(res, title="Caixa Aberto")


@caixa_app.command("lancar")
def cmd_caixa_lancar(
    tipo: str = typer.Argument(..., help="income | expense"),
    valor: str = typer.Argument(...),
    descricao: str = typer.Option("", help="Ex.: sangria, suprimento, compra de gelo"),
    forma: str = typer.Option("dinheiro", help="dinheiro | pix | cartao | ..."),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    """Lançamento avulso no caixa aberto."""
    _ready(db_path)
    try:
        res = uc_caixa.lancar(tipo, parse_valor(valor), descricao, forma, Sessao(loja, operador), db_path=db_path)
    except (CaixaError, ValueError) as e:
        _erro(e)
    _display_table(res, title="Lançamento Registrado")


@caixa_app.command("fechar")
def cmd_caixa_fechar(
    valor: str = typer.Argument(..., help="Valor contado na gaveta"),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        r = uc_caixa.fechar_caixa(parse_valor(valor), Sessao(loja, operador), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    cor = "green" if r.diferenca == 0 else "red"
    console.print(Panel(
        f"Saldo esperado: {formata_preco(r.saldo_esperado)}\n"
        f"Valor contado:  {formata_preco(r.valor_fechamento)}\n"
        f"Diferença:      [{cor}]{formata_preco(r.diferenca)}[/]",
        title="Caixa Fechado",
    ))


@caixa_app.command("resumo")
def cmd_caixa_resumo(
    caixa_id: Optional[int] = typer.Option(None, "--id", help="Caixa específico (padrão: aberto)"),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = relatorio_caixa(caixa_id, Sessao(loja), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_report(res, title="Conferência de Caixa")


# -----------------------
# pedidos (delivery)
# -----------------------

pedido_app = typer.Typer(help="Pedidos de delivery")
app.add_typer(pedido_app, name="pedido")


@pedido_app.command("finalizar")
def cmd_pedido_finalizar(
    path: str = typer.Argument(..., help="JSON do checkout (cliente, bairro, itens, pagamento)"),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    """Finaliza um pedido: taxa, cashback, gravação e lançamento no caixa."""
    _ready(db_path)
    try:
        dados = pedido_from_dict(_load_json(path))
        res = finalizar_pedido(dados, Sessao(loja, operador), db_path=db_path)
    except (CaixaError, ValueError) as e:
        _erro(e)
    _display_table(res, title=f"Pedido #{res['pedido_id']}")


@pedido_app.command("status")
def cmd_pedido_status(
    pedido_id: int = typer.Argument(...),
    status: str = typer.Argument(..., help="confirmed | preparing | out_for_delivery | ready_for_pickup | delivered | cancelled"),
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = atualizar_status_pedido(pedido_id, status, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    typer.echo(f">> Pedido #{pedido_id}: {res['status_anterior']} -> {res['status']}")


@pedido_app.command("ver")
def cmd_pedido_ver(pedido_id: int = typer.Argument(...), db_path: str = DbOpt):
    _ready(db_path)
    try:
        p = obter_pedido(pedido_id, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    itens = [
        {"produto": i["produto_nome"], "tamanho": i["tamanho"] or "", "qtd": i["quantidade"],
         "unitario": Decimal(i["preco_unitario"]), "total": Decimal(i["total"])}
        for i in p["itens"]
    ]
    _display_table(itens, title=f"Itens do Pedido #{pedido_id}")
    _display_table(
        {k: (Decimal(p[k]) if k in ("subtotal", "taxa_entrega", "cashback_aplicado", "total") else p[k])
         for k in ("cliente_nome", "bairro", "status", "forma_pagamento",
                   "subtotal", "taxa_entrega", "cashback_aplicado", "total")},
        title="Totais",
    )


# -----------------------
# PDV
# -----------------------

pdv_app = typer.Typer(help="Vendas de balcão")
app.add_typer(pdv_app, name="pdv")


@pdv_app.command("venda")
def cmd_pdv_venda(
    path: str = typer.Argument(..., help="JSON com itens, forma_pagamento, desconto e valor_recebido"),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        d = _load_json(path)
        desconto = d.get("desconto") or {}
        res = uc_pdv.registrar_venda_pdv(
            [_item_venda(i) for i in d.get("itens") or []],
            d.get("forma_pagamento"),
            Sessao(loja, operador),
            desconto_tipo=desconto.get("tipo", "nenhum"),
            desconto_valor=parse_valor(desconto.get("valor")) or Decimal("0"),
            valor_recebido=parse_valor(d.get("valor_recebido")),
            cliente_nome=d.get("cliente_nome"),
            pagamentos=parse_pagamentos(d.get("pagamentos")),
            db_path=db_path,
        )
    except (CaixaError, ValueError) as e:
        _erro(e)
    _display_table(res, title=f"Venda PDV #{res['venda_id']}")


@pdv_app.command("cancelar")
def cmd_pdv_cancelar(
    venda_id: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        uc_pdv.cancelar_venda_pdv(venda_id, motivo, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    typer.echo(f">> Venda #{venda_id} cancelada.")


# -----------------------
# mesas
# -----------------------

mesa_app = typer.Typer(help="Comandas de mesa")
app.add_typer(mesa_app, name="mesa")


@mesa_app.command("cadastrar")
def cmd_mesa_cadastrar(
    numero: int = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    capacidade: int = typer.Option(4),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    uc_mesa.cadastrar_mesa(numero, nome, capacidade, Sessao(loja), db_path=db_path)
    typer.echo(f">> Mesa {numero} cadastrada.")


@mesa_app.command("list")
def cmd_mesa_list(loja: int = LojaOpt, db_path: str = DbOpt):
    _ready(db_path)
    rows = uc_mesa.listar_mesas(Sessao(loja), db_path=db_path)
    _display_table(
        [{"numero": r["numero"], "nome": r["nome"], "status": r["status"], "venda": r["venda_atual_id"]} for r in rows],
        title="Mesas",
    )


@mesa_app.command("abrir")
def cmd_mesa_abrir(
    numero: int = typer.Argument(...),
    cliente: Optional[str] = typer.Option(None),
    pessoas: int = typer.Option(1),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = uc_mesa.abrir_venda_mesa(numero, Sessao(loja, operador), cliente, pessoas, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    typer.echo(f">> Mesa {numero} aberta: venda #{res['venda_id']}")


@mesa_app.command("item")
def cmd_mesa_item(
    venda_id: int = typer.Argument(...),
    nome: str = typer.Option(..., help="Nome do produto"),
    codigo: str = typer.Option(""),
    quantidade: int = typer.Option(1),
    preco: Optional[str] = typer.Option(None, help="Preço unitário"),
    peso: Optional[str] = typer.Option(None, help="Peso (ex.: 0,350 ou 350g)"),
    preco_grama: Optional[str] = typer.Option(None, help="Preço por grama para itens pesáveis"),
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        item = _item_venda({"codigo": codigo, "nome": nome, "quantidade": quantidade,
                            "preco": preco, "peso": peso, "preco_grama": preco_grama})
        res = uc_mesa.adicionar_item_mesa(venda_id, item, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(res, title=f"Venda de Mesa #{venda_id}")


@mesa_app.command("remover-item")
def cmd_mesa_remover_item(venda_id: int = typer.Argument(...), item_id: int = typer.Argument(...),
                          db_path: str = DbOpt):
    _ready(db_path)
    try:
        res = uc_mesa.remover_item_mesa(venda_id, item_id, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(res, title=f"Venda de Mesa #{venda_id}")


@mesa_app.command("desconto")
def cmd_mesa_desconto(
    venda_id: int = typer.Argument(...),
    tipo: str = typer.Argument(..., help="percentual | valor | nenhum"),
    valor: str = typer.Argument("0"),
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = uc_mesa.aplicar_desconto_mesa(venda_id, tipo, parse_valor(valor) or Decimal("0"), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(res, title=f"Venda de Mesa #{venda_id}")


@mesa_app.command("dividir")
def cmd_mesa_dividir(venda_id: int = typer.Argument(...), partes: int = typer.Argument(...),
                     db_path: str = DbOpt):
    """Mostra quanto cada pessoa paga."""
    _ready(db_path)
    try:
        valores = uc_mesa.dividir_conta_mesa(venda_id, partes, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table([{"pessoa": i + 1, "valor": v} for i, v in enumerate(valores)], title="Divisão da Conta")


@mesa_app.command("fechar")
def cmd_mesa_fechar(
    venda_id: int = typer.Argument(...),
    forma: str = typer.Option(..., help="dinheiro | pix | cartao | ..."),
    recebido: Optional[str] = typer.Option(None, help="Valor recebido em dinheiro"),
    parte: Optional[List[str]] = typer.Option(None, "--parte", help="Forma=valor no pagamento misto, ex.: pix=20,00"),
    loja: int = LojaOpt,
    operador: Optional[str] = OperadorOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = uc_mesa.fechar_venda_mesa(venda_id, forma, Sessao(loja, operador),
                                        valor_recebido=parse_valor(recebido),
                                        pagamentos=_partes(parte), db_path=db_path)
    except (CaixaError, ValueError) as e:
        _erro(e)
    _display_table(res, title=f"Venda de Mesa #{venda_id} Fechada")


@mesa_app.command("cancelar")
def cmd_mesa_cancelar(venda_id: int = typer.Argument(...), db_path: str = DbOpt):
    _ready(db_path)
    try:
        uc_mesa.cancelar_venda_mesa(venda_id, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    typer.echo(f">> Venda de mesa #{venda_id} cancelada.")


# -----------------------
# cashback
# -----------------------

cashback_app = typer.Typer(help="Saldo e extrato de cashback")
app.add_typer(cashback_app, name="cashback")


@cashback_app.command("saldo")
def cmd_cashback_saldo(telefone: str = typer.Argument(...), db_path: str = DbOpt):
    _ready(db_path)
    try:
        res = uc_cashback.consultar_cashback(telefone, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    res["telefone"] = formata_telefone(res["telefone"])
    _display_table(res, title="Cashback")


@cashback_app.command("buscar")
def cmd_cashback_buscar(nome: str = typer.Argument(..., help="Parte do nome do cliente"), db_path: str = DbOpt):
    """Procura clientes pelo nome e mostra o saldo de cada um."""
    _ready(db_path)
    try:
        rows = uc_cashback.buscar_clientes(nome, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    for r in rows:
        r["telefone"] = formata_telefone(r["telefone"])
    _display_table(rows, title=f"Clientes: {nome}")


@cashback_app.command("extrato")
def cmd_cashback_extrato(telefone: str = typer.Argument(...), db_path: str = DbOpt):
    _ready(db_path)
    try:
        rows = uc_cashback.extrato(telefone, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(rows, title="Extrato de Cashback")


# -----------------------
# fluxo de caixa
# -----------------------

fluxo_app = typer.Typer(help="Movimentos do fluxo de caixa mensal")
app.add_typer(fluxo_app, name="fluxo")


@fluxo_app.command("add")
def cmd_fluxo_add(
    tipo: str = typer.Argument(..., help="receita | despesa | gasto_fixo | transferencia_entrada | transferencia_saida"),
    valor: str = typer.Argument(...),
    data: str = typer.Option(..., help="YYYY-MM-DD ou DD/MM/AAAA"),
    descricao: str = typer.Option(""),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    _ready(db_path)
    try:
        res = uc_fluxo.registrar_movimento(tipo, parse_valor(valor), data, descricao, Sessao(loja), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_table(res, title="Movimento Registrado")


@fluxo_app.command("importar")
def cmd_fluxo_importar(path: str = typer.Argument(...), loja: int = LojaOpt, db_path: str = DbOpt):
    _ready(db_path)
    try:
        info = uc_fluxo.importar_movimentos(path, Sessao(loja), db_path=db_path)
    except (CaixaError, FileNotFoundError) as e:
        _erro(e)
    _display_table(info, title="Importação do Fluxo de Caixa")


# -----------------------
# relatórios
# -----------------------

rel_app = typer.Typer(help="Relatórios gerenciais")
app.add_typer(rel_app, name="rel")


@rel_app.command("diario")
def rel_diario(
    data: Optional[str] = typer.Option(None, help="YYYY-MM-DD (padrão: hoje)"),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    try:
        res = relatorio_diario(data, Sessao(loja), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_report(res, title="Resumo Diário")


@rel_app.command("mensal")
def rel_mensal(
    ano_mes: str = typer.Argument(..., help="YYYY-MM"),
    saldo_inicial: str = typer.Option("0", help="Saldo do fim do mês anterior"),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    try:
        res = relatorio_mensal(ano_mes, Sessao(loja), parse_valor(saldo_inicial) or Decimal("0"), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_report(res, title=f"Resumo Mensal {ano_mes}")


@rel_app.command("entregas")
def rel_entregas(
    data: Optional[str] = typer.Option(None, help="YYYY-MM-DD (padrão: hoje)"),
    top: int = typer.Option(10, help="Top N bairros"),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    try:
        res = relatorio_entregas(data, Sessao(loja), top, db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_report(res, title="Entregas por Bairro")


@rel_app.command("caixa")
def rel_caixa(
    caixa_id: Optional[int] = typer.Option(None, "--id"),
    loja: int = LojaOpt,
    db_path: str = DbOpt,
):
    try:
        res = relatorio_caixa(caixa_id, Sessao(loja), db_path=db_path)
    except CaixaError as e:
        _erro(e)
    _display_report(res, title="Conferência de Caixa")


@app.command("logs")
def cmd_logs(
    tipo: str = typer.Argument("transactions", help=" | ".join(LOG_FILES)),
    linhas: int = typer.Option(50),
):
    """Mostra as últimas linhas de um arquivo de log."""
    typer.echo(get_log_summary(tipo, linhas))


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
