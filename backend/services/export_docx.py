from docx import Document
from io import BytesIO

def _add_rows_table(doc, header, rows):
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = header
    table.rows[0].cells[1].text = "Valor"
    for r in rows:
        row = table.add_row().cells
        row[0].text = str(r.get("label",""))
        row[1].text = str(r.get("value",""))

def build_docx(dataset: dict):
    doc = Document()
    doc.add_heading(dataset.get("title","Simulação de Preço de Venda"), 0)
    doc.add_heading("Entrada", level=1)
    _add_rows_table(doc, "Campo", dataset.get("entrada", []))
    doc.add_heading("Resultado", level=1)
    _add_rows_table(doc, "Indicador", dataset.get("resultado", []))
    levels = dataset.get("levels", [])
    doc.add_heading("Matriz de preços", level=1)
    table = doc.add_table(rows=1, cols=2 + len(levels))
    table.rows[0].cells[0].text = "Categoria"
    table.rows[0].cells[1].text = "Margem"
    for idx, level in enumerate(levels, start=2):
        table.rows[0].cells[idx].text = level
    for m in dataset.get("matriz", []):
        row = table.add_row().cells
        row[0].text = str(m.get("label",""))
        row[1].text = str(m.get("margin",""))
        for idx, price in enumerate(m.get("levels", []), start=2):
            row[idx].text = str(price)
    bio = BytesIO()
    doc.save(bio); bio.seek(0)
    return bio.getvalue(), "simulacao.docx"
