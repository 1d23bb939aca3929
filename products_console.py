"""Interactive console front end for the products API.

The console keeps the whole product list in memory, renders it as a
table together with a product form, and translates each command into
exactly one API call through :class:`products_client.ProductsAPI`.
After every successful mutation the full list is fetched again; local
state is never patched optimistically.

The form has two states:

* **Creating** – no product id is remembered; ``save`` creates a product.
* **Editing** – ``edit`` loaded a product and remembered its id;
  ``save`` updates that product.

A successful save or ``reset`` returns the form to Creating.  A failed
save shows a blocking alert and leaves the form untouched so the user
can correct it and retry.  A failure to load the list is shown as a
banner above the table until the next successful load.

The console expects one optional environment variable:

``PRODUCTS_API_URL``
    URL of the products collection.  Defaults to
    ``http://localhost:4000/api/products``.

Usage:
    python products_console.py
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from products_client import DEFAULT_API_URL, ProductsAPI


logger = logging.getLogger(__name__)

LOAD_ERROR = "Error loading products!! Is the backend running?"
SAVE_ERROR = "Error saving product"
DETAILS_ERROR = "Error loading product details"
DELETE_ERROR = "Error deleting product"
DELETE_PROMPT = "Delete this product?"

HELP_TEXT = """Commands:
  list                     reload the product list
  set <field> <value>      set a form field (name, price, description, inStock)
  save                     create the product, or update it when editing
  edit <row>               load the product in table row <row> into the form
  delete <row>             delete the product in table row <row>
  reset                    clear the form and stop editing
  help                     show this message
  quit                     leave the console"""

TRUE_WORDS = {"1", "true", "yes", "y", "on"}
FALSE_WORDS = {"0", "false", "no", "n", "off"}


def parse_price(text: str) -> Optional[float]:
    """Coerce the price typed in the form to a number.

    Empty or unparseable input becomes ``None`` so that the server
    rejects it instead of the client guessing a value.
    """
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


@dataclass
class ProductForm:
    """In-memory state of the product form."""

    name: str = ""
    price: str = ""
    description: str = ""
    in_stock: bool = True
    editing_id: str = ""

    @property
    def is_editing(self) -> bool:
        return bool(self.editing_id)

    def reset(self) -> None:
        self.name = ""
        self.price = ""
        self.description = ""
        self.in_stock = True
        self.editing_id = ""

    def fill(self, product: Dict[str, Any]) -> None:
        """Populate the form from a product returned by the API and enter Editing."""
        self.editing_id = str(product["id"])
        self.name = product.get("name") or ""
        price = product.get("price")
        if price is None:
            self.price = ""
        elif isinstance(price, float) and price.is_integer():
            self.price = str(int(price))
        else:
            self.price = str(price)
        self.description = product.get("description") or ""
        self.in_stock = bool(product.get("inStock"))

    def set_field(self, field_name: str, value: str) -> None:
        key = field_name.lower().replace("_", "")
        if key == "name":
            self.name = value
        elif key == "price":
            self.price = value
        elif key == "description":
            self.description = value
        elif key == "instock":
            word = value.strip().lower()
            if word in TRUE_WORDS:
                self.in_stock = True
            elif word in FALSE_WORDS:
                self.in_stock = False
            else:
                raise ValueError(f"inStock must be yes or no, got {value!r}")
        else:
            raise ValueError(f"Unknown field {field_name!r}")

    def payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "price": parse_price(self.price),
            "description": self.description,
            "inStock": self.in_stock,
        }


def _default_write(text: str) -> None:
    print(text)


def _default_confirm(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _default_alert(message: str) -> None:
    print(f"\n!! {message}")
    try:
        input("Press Enter to continue...")
    except EOFError:
        pass


class ProductsConsole:
    """Console view over the products API.

    Args:
        api: Client used for every request.
        confirm: Asks a yes/no question; used before deleting.
        alert: Shows a blocking error message.
        write: Outputs rendered text.
    """

    def __init__(
        self,
        api: ProductsAPI,
        *,
        confirm: Optional[Callable[[str], bool]] = None,
        alert: Optional[Callable[[str], None]] = None,
        write: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.api = api
        self.confirm = confirm or _default_confirm
        self.alert = alert or _default_alert
        self.write = write or _default_write
        self.products: List[Dict[str, Any]] = []
        self.form = ProductForm()
        # Busy flag: set while a save is in flight.
        self.loading = False
        # Persistent banner shown when the list could not be loaded.
        self.error = ""

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def load_products(self) -> bool:
        self.error = ""
        products, error = self.api.list_products()
        if error:
            logger.error("Failed to load products: %s", error.get("message"))
            self.error = LOAD_ERROR
            return False
        self.products = products
        return True

    def submit(self) -> bool:
        """Create or update the product held in the form."""
        if self.loading:
            return False
        self.loading = True
        try:
            payload = self.form.payload()
            if self.form.is_editing:
                _, error = self.api.update_product(self.form.editing_id, payload)
            else:
                _, error = self.api.create_product(payload)
            if error:
                logger.error("Failed to save product: %s", error.get("message"))
                self.alert(SAVE_ERROR)
                return False
            self.reset_form()
            self.load_products()
            return True
        finally:
            self.loading = False

    def edit(self, product_id: str) -> bool:
        product, error = self.api.get_product(product_id)
        if error or not product:
            logger.error("Failed to load product %s: %s", product_id, (error or {}).get("message"))
            self.alert(DETAILS_ERROR)
            return False
        self.form.fill(product)
        return True

    def delete(self, product_id: str) -> bool:
        if not self.confirm(DELETE_PROMPT):
            return False
        ok, error = self.api.delete_product(product_id)
        if not ok:
            logger.error("Failed to delete product %s: %s", product_id, (error or {}).get("message"))
            self.alert(DELETE_ERROR)
            return False
        self.load_products()
        return True

    def reset_form(self) -> None:
        self.form.reset()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self) -> str:
        form = self.form
        lines = ["Products CRUD (Console)", ""]
        lines.append("Editing product " + form.editing_id if form.is_editing else "New product")
        lines.append(f"  Name:        {form.name}")
        lines.append(f"  Price:       {form.price}")
        lines.append(f"  Description: {form.description}")
        lines.append(f"  In Stock:    {'Yes' if form.in_stock else 'No'}")
        action = "Update Product" if form.is_editing else "Save Product"
        if self.loading:
            action += " (saving...)"
        lines.append(f"  [save] {action}   [reset] Reset")
        lines.append("")
        lines.append("Products List")
        if self.error:
            lines.append(f"!! {self.error}")

        rows = [
            (str(index), str(p.get("name", "")), f"{p.get('price', '')}", "Yes" if p.get("inStock") else "No")
            for index, p in enumerate(self.products, start=1)
        ]
        header = ("#", "Name", "Price", "In Stock")
        widths = [max(len(header[i]), *(len(row[i]) for row in rows)) if rows else len(header[i]) for i in range(4)]
        lines.append("  ".join(title.ljust(widths[i]) for i, title in enumerate(header)))
        lines.append("  ".join("-" * width for width in widths))
        if not rows:
            lines.append("No products yet.")
        for row in rows:
            lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Command loop
    # ------------------------------------------------------------------
    def _product_id_for(self, ref: str) -> Optional[str]:
        """Map a 1-based table row to a product id."""
        try:
            index = int(ref)
        except ValueError:
            return None
        if 1 <= index <= len(self.products):
            return str(self.products[index - 1]["id"])
        return None

    def handle_command(self, line: str) -> bool:
        """Execute one command line.  Returns ``False`` when the user quits."""
        try:
            parts = shlex.split(line)
        except ValueError as exc:
            self.write(f"Could not parse command: {exc}")
            return True
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in {"quit", "exit", "q"}:
            return False
        if command == "help":
            self.write(HELP_TEXT)
            return True
        if command in {"list", "refresh"}:
            self.load_products()
        elif command == "set":
            if len(args) < 1:
                self.write("Usage: set <field> <value>")
                return True
            try:
                self.form.set_field(args[0], " ".join(args[1:]))
            except ValueError as exc:
                self.write(str(exc))
                return True
        elif command == "save":
            self.submit()
        elif command == "reset":
            self.reset_form()
        elif command in {"edit", "delete"}:
            product_id = self._product_id_for(args[0]) if args else None
            if product_id is None:
                self.write(f"Usage: {command} <row>  (row number from the table)")
                return True
            if command == "edit":
                self.edit(product_id)
            else:
                self.delete(product_id)
        else:
            self.write(f"Unknown command {command!r}. Type 'help' for a list of commands.")
            return True
        self.write(self.render())
        return True

    def run(self, read_line: Callable[[str], str] = input) -> None:
        """Load the list and process commands until ``quit`` or end of input."""
        self.load_products()
        self.write(self.render())
        self.write("Type 'help' for a list of commands.")
        while True:
            try:
                line = read_line("> ")
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle_command(line):
                break


def console_log_level(name: Optional[str]) -> int:
    """Map ``LOG_LEVEL`` to a logging level; unknown names mean ``WARNING``."""
    level = (name or "").strip().upper()
    level = {"WARN": "WARNING", "FATAL": "CRITICAL"}.get(level, level)
    if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
        return logging.WARNING
    return getattr(logging, level)


def main() -> None:
    logging.basicConfig(
        level=console_log_level(os.getenv("LOG_LEVEL")),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    api = ProductsAPI(os.getenv("PRODUCTS_API_URL") or DEFAULT_API_URL)
    ProductsConsole(api).run()


if __name__ == "__main__":
    main()
