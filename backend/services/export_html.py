from jinja2 import Template
HTML_TPL = """
<!doctype html><html lang="pt-br"><head><meta charset="utf-8"/>
<title>{{ title }}</title>
<style>body{font-family:Arial,sans-serif;padding:24px}table{border-collapse:collapse;width:100%;margin-bottom:16px}
th,td{border:1px solid #ddd;padding:6px;font-size:14px}th{background:#f0f0f0}</style>
</head><body>
<h1>{{ title }}</h1>
<h2>Entrada</h2>
<table><tr><th>Campo</th><th>Valor</th></tr>
{% for r in entrada %}<tr><td>{{r.label}}</td><td>{{r.value}}</td></tr>{% endfor %}
</table>
<h2>Resultado</h2>
<table><tr><th>Indicador</th><th>Valor</th></tr>
{% for r in resultado %}<tr><td>{{r.label}}</td><td>{{r.value}}</td></tr>{% endfor %}
</table>
<h2>Matriz de preços</h2>
<table><tr><th>Categoria</th><th>Margem</th>{% for l in levels %}<th>{{l}}</th>{% endfor %}</tr>
{% for m in matriz %}<tr><td>{{m.label}}</td><td>{{m.margin}}</td>{% for p in m.levels %}<td>{{p}}</td>{% endfor %}</tr>{% endfor %}
</table></body></html>
"""
def build_html(dataset: dict):
    tpl = Template(HTML_TPL, autoescape=True)
    html = tpl.render(title=dataset.get("title","Simulação de Preço de Venda"),
                      entrada=dataset.get("entrada",[]),
                      resultado=dataset.get("resultado",[]),
                      levels=dataset.get("levels",[]),
                      matriz=dataset.get("matriz",[]))
    return html, "simulacao.html"
