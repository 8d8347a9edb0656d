"""Initial chart of accounts and accounting settings.

Categories are listed parents first. Each row is
(code, name, parent_code, fiscal_code, account_nature); the nature of
non-root rows always matches the branch root.
"""

from parkledger.domain.entities import AccountNature, SettingType

DEBIT = AccountNature.DEBIT
CREDIT = AccountNature.CREDIT

INITIAL_CATEGORIES = [
    # Level A - main branches
    ("A", "Activos", None, "100", DEBIT),
    ("B", "Pasivos", None, "200", CREDIT),
    ("C", "Capital", None, "300", CREDIT),
    ("D", "Ingresos", None, "400", CREDIT),
    ("E", "Costos", None, "500", DEBIT),
    ("F", "Gastos", None, "600", DEBIT),
    # Level B
    ("A-1", "Activos Circulantes", "A", "101", DEBIT),
    ("A-2", "Activos Fijos", "A", "102", DEBIT),
    ("A-3", "Activos Diferidos", "A", "103", DEBIT),
    ("B-1", "Pasivos Circulantes", "B", "201", CREDIT),
    ("B-2", "Pasivos Fijos", "B", "202", CREDIT),
    ("B-3", "Pasivos Diferidos", "B", "203", CREDIT),
    ("C-1", "Capital Social", "C", "301", CREDIT),
    ("C-2", "Capital Ganado", "C", "302", CREDIT),
    ("D-1", "Ingresos Operacionales", "D", "401", CREDIT),
    ("D-2", "Ingresos No Operacionales", "D", "402", CREDIT),
    ("E-1", "Costos Directos", "E", "501", DEBIT),
    ("E-2", "Costos Indirectos", "E", "502", DEBIT),
    ("F-1", "Gastos Operacionales", "F", "601", DEBIT),
    ("F-2", "Gastos No Operacionales", "F", "602", DEBIT),
    # Level C
    ("A-1-1", "Efectivo y Equivalentes", "A-1", "101-01", DEBIT),
    ("A-1-2", "Cuentas por Cobrar", "A-1", "101-02", DEBIT),
    ("A-1-3", "Inventarios", "A-1", "101-03", DEBIT),
    ("A-2-1", "Terrenos", "A-2", "102-01", DEBIT),
    ("A-2-2", "Edificios", "A-2", "102-02", DEBIT),
    ("A-2-3", "Maquinaria y Equipo", "A-2", "102-03", DEBIT),
    ("A-2-4", "Depreciación Acumulada", "A-2", "102-04", DEBIT),
    ("B-1-1", "Proveedores", "B-1", "201-01", CREDIT),
    ("B-1-2", "Sueldos por Pagar", "B-1", "201-02", CREDIT),
    ("D-1-1", "Ingresos por Servicios", "D-1", "401-01", CREDIT),
    ("D-1-2", "Ingresos por Concesiones", "D-1", "401-02", CREDIT),
    ("D-1-3", "Ingresos por Patrocinios", "D-1", "401-03", CREDIT),
    ("F-1-1", "Gastos de Administración", "F-1", "601-01", DEBIT),
    ("F-1-2", "Gastos de Ventas", "F-1", "601-02", DEBIT),
    ("F-1-3", "Gastos de Mantenimiento", "F-1", "601-03", DEBIT),
    ("F-1-4", "Gastos de Depreciación", "F-1", "601-04", DEBIT),
    ("F-1-5", "Sueldos y Salarios", "F-1", "601-05", DEBIT),
]

# (key, value, data_type, category, description)
INITIAL_SETTINGS = [
    ("fiscal_year_start", "01-01", SettingType.STRING, "fiscal", "Fiscal year start (MM-DD)"),
    ("fiscal_year_end", "12-31", SettingType.STRING, "fiscal", "Fiscal year end (MM-DD)"),
    ("currency", "MXN", SettingType.STRING, "general", "Base currency"),
    ("tax_rate", "16", SettingType.NUMBER, "fiscal", "VAT rate (%)"),
    ("auto_generate_entries", "true", SettingType.BOOLEAN, "automation", "Generate entries automatically"),
    ("depreciation_method", "straight_line", SettingType.STRING, "assets", "Default depreciation method"),
    ("entry_number_format", "AST-{YYYY}-{MM}-{####}", SettingType.STRING, "numbering", "Journal entry number format"),
]
