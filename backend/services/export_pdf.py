from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from io import BytesIO

def build_pdf(dataset: dict):
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    w, h = A4
    y = h - 50

    def _section(title, rows):
        nonlocal y
        y -= 10; c.setFont("Helvetica-Bold", 12); c.drawString(50, y, title); y -= 20
        c.setFont("Helvetica", 10)
        for r in rows:
            c.drawString(60, y, f"- {r.get('label')}: {r.get('value')}"[:110]); y -= 15
            if y < 80:
                c.showPage(); y = h - 50; c.setFont("Helvetica", 10)

    c.setFont("Helvetica-Bold", 16)
    c.drawString(50, y, dataset.get("title","Simulação de Preço de Venda")); y -= 30
    _section("Entrada", dataset.get("entrada", []))
    _section("Resultado", dataset.get("resultado", []))
    levels = dataset.get("levels", [])
    matriz = [
        {"label": f"{m.get('label')} ({m.get('margin')})",
         "value": "  ".join(f"{l}: {p}" for l, p in zip(levels, m.get("levels", [])))}
        for m in dataset.get("matriz", [])
    ]
    _section("Matriz de preços", matriz)
    c.showPage(); c.save()
    return buf.getvalue(), "simulacao.pdf"
