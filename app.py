# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db caixa.db
  python app.py params show
  python app.py bairros importar bairros.xlsx
  python app.py caixa abrir 100,00 --operador ana
  python app.py pedido finalizar checkout.json
  python app.py rel diario --data 2024-03-15
"""

from caixa.adapters.cli import main

if __name__ == "__main__":
    main()
