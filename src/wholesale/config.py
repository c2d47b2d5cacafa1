from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_VERSION = "2025-01"


@dataclass(slots=True)
class SellerDetails:
    name: str = "STREIM STUDIO B.V."
    address: str = "Keizersgracht 572"
    postal_city: str = "1017 EM Amsterdam"
    website: str = "www.streim.nl"
    email: str = "daniel@streim.nl"
    bank: str = "ABN Amro"
    iban: str = "NL20ABNA0110719298"
    bic: str = "ABNANL2A"
    registration_number: str = "85681563"
    vat_id: str = "NL863705832B01"


@dataclass(slots=True)
class ShopifyConfig:
    store: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION
    page_limit: int = 250
    timeout_sec: int = 30
    retries: int = 2
    retry_delay_sec: float = 1.0
    currency: str = "EUR"

    @property
    def configured(self) -> bool:
        return bool(self.store and self.access_token)

    @property
    def base_url(self) -> str:
        store = self.store.removeprefix("https://").removeprefix("http://").rstrip("/")
        return f"https://{store}/admin/api/{self.api_version}"


@dataclass(slots=True)
class Settings:
    root_dir: Path
    data_dir: Path
    db_path: Path
    logs_dir: Path
    exports_dir: Path
    shopify: ShopifyConfig
    seller: SellerDetails = field(default_factory=SellerDetails)

    @classmethod
    def load(cls, base_dir: Path | None = None) -> Settings:
        load_dotenv(override=False)

        root_env = os.getenv("WHOLESALE_HOME")
        root_dir = Path(root_env).expanduser().resolve() if root_env else (base_dir or Path.cwd()).resolve()

        data_dir = Path(os.getenv("WHOLESALE_DATA_DIR", root_dir / "data")).expanduser().resolve()
        db_path = Path(os.getenv("WHOLESALE_DB_PATH", data_dir / "wholesale.sqlite3")).expanduser().resolve()
        logs_dir = Path(os.getenv("WHOLESALE_LOG_DIR", root_dir / "logs")).expanduser().resolve()
        exports_dir = Path(os.getenv("WHOLESALE_EXPORT_DIR", root_dir / "exports")).expanduser().resolve()

        shopify = ShopifyConfig(
            store=os.getenv("SHOPIFY_STORE", ""),
            access_token=os.getenv("SHOPIFY_ACCESS_TOKEN", ""),
            api_version=os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
            page_limit=int(os.getenv("SHOPIFY_PAGE_LIMIT", "250")),
            timeout_sec=int(os.getenv("SHOPIFY_TIMEOUT_SEC", "30")),
            retries=int(os.getenv("SHOPIFY_RETRIES", "2")),
            retry_delay_sec=float(os.getenv("SHOPIFY_RETRY_DELAY_SEC", "1")),
            currency=os.getenv("SHOPIFY_CURRENCY", "EUR"),
        )

        return cls(
            root_dir=root_dir,
            data_dir=data_dir,
            db_path=db_path,
            logs_dir=logs_dir,
            exports_dir=exports_dir,
            shopify=shopify,
            seller=cls._load_seller(),
        )

    @staticmethod
    def _load_seller() -> SellerDetails:
        """
        Реквизиты продавца для документов.
        Каждое поле переопределяется переменной SELLER_<ПОЛЕ>, например SELLER_IBAN.
        """
        defaults = SellerDetails()
        values = {}
        for item in fields(SellerDetails):
            values[item.name] = os.getenv(f"SELLER_{item.name.upper()}", getattr(defaults, item.name))
        return SellerDetails(**values)

    def ensure_directories(self) -> None:
        for path in [self.root_dir, self.data_dir, self.logs_dir, self.exports_dir]:
            path.mkdir(parents=True, exist_ok=True)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
