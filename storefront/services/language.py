# storefront/services/language.py
import logging

from storefront.core.config import get_settings
from storefront.repositories.local_storage_repo import LocalStorageRepository

settings = get_settings()
logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "np", "hi")
DEFAULT_LANGUAGE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "addToCart": "Add to Cart",
        "cart": "Cart",
        "yourCart": "Your Cart",
        "cartEmpty": "Your cart is empty",
        "startShopping": "Start Shopping",
        "continueShopping": "Continue Shopping",
        "orderSummary": "Order Summary",
        "subtotal": "Subtotal",
        "grandTotal": "Grand Total",
        "proceedToCheckout": "Proceed to Checkout",
        "wishlist": "My Wishlist",
        "wishlistEmpty": "Your wishlist is empty",
        "login": "Login",
    },
    "np": {
        "addToCart": "कार्टमा थप्नुहोस्",
        "cart": "कार्ट",
        "yourCart": "तपाईंको कार्ट",
        "cartEmpty": "तपाईंको कार्ट खाली छ",
        "startShopping": "किनमेल सुरु गर्नुहोस्",
        "continueShopping": "किनमेल जारी राख्नुहोस्",
        "orderSummary": "अर्डर सारांश",
        "subtotal": "उप-जम्मा",
        "grandTotal": "कुल जम्मा",
        "proceedToCheckout": "चेकआउटमा जानुहोस्",
        "wishlist": "मेरो विशलिस्ट",
        "wishlistEmpty": "तपाईंको विशलिस्ट खाली छ",
        "login": "लग-इन",
    },
    "hi": {
        "addToCart": "कार्ट में जोड़ें",
        "cart": "कार्ट",
        "yourCart": "आपका कार्ट",
        "cartEmpty": "आपका कार्ट खाली है",
        "startShopping": "खरीदारी शुरू करें",
        "continueShopping": "खरीदारी जारी रखें",
        "orderSummary": "ऑर्डर सारांश",
        "subtotal": "उप-योग",
        "grandTotal": "कुल योग",
        "proceedToCheckout": "चेकआउट पर जाएँ",
        "wishlist": "मेरी विशलिस्ट",
        "wishlistEmpty": "आपकी विशलिस्ट खाली है",
        "login": "लॉगिन",
    },
}


class LanguageContext:
    """
    Current UI language, remembered in local storage.

    Unknown or unreadable stored values fall back to English.
    """

    def __init__(
        self,
        storage: LocalStorageRepository,
        storage_key: str | None = None,
    ):
        self.storage = storage
        self.storage_key = storage_key or settings.LANGUAGE_STORAGE_KEY
        self._language = self._load()

    def _load(self) -> str:
        try:
            stored = self.storage.get_item(self.storage_key)
        except Exception:
            logger.exception("Failed to read language from local storage")
            return DEFAULT_LANGUAGE
        return stored if stored in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

    def _persist(self) -> None:
        try:
            self.storage.set_item(self.storage_key, self._language)
        except Exception:
            logger.exception("Failed to write language to local storage")

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        """
        Raises:
            ValueError: if `language` is not one of SUPPORTED_LANGUAGES.
        """
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self._language = language
        self._persist()

    def toggle_language(self) -> str:
        """Cycle en -> np -> hi -> en and return the new language."""
        idx = SUPPORTED_LANGUAGES.index(self._language)
        self.set_language(SUPPORTED_LANGUAGES[(idx + 1) % len(SUPPORTED_LANGUAGES)])
        return self._language

    def t(self, key: str) -> str:
        return (
            TRANSLATIONS[self._language].get(key)
            or TRANSLATIONS[DEFAULT_LANGUAGE].get(key)
            or key
        )
