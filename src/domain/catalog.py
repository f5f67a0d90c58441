"""Built-in catalog of currencies the converter knows about."""

from __future__ import annotations

from .currency import Currency, CurrencyClass, crypto, fiat

FIAT_CURRENCIES: tuple[Currency, ...] = (
    fiat("USD", "US Dollar"),
    fiat("EUR", "Euro"),
    fiat("GBP", "British Pound"),
    fiat("JPY", "Japanese Yen"),
    fiat("CHF", "Swiss Franc"),
    fiat("CNY", "Chinese Yuan"),
    fiat("CAD", "Canadian Dollar"),
    fiat("AUD", "Australian Dollar"),
    fiat("NZD", "New Zealand Dollar"),
    fiat("SEK", "Swedish Krona"),
    fiat("NOK", "Norwegian Krone"),
    fiat("DKK", "Danish Krone"),
    fiat("RUB", "Russian Ruble"),
    fiat("KZT", "Kazakhstani Tenge"),
    fiat("UAH", "Ukrainian Hryvnia"),
    fiat("BYN", "Belarusian Ruble"),
    fiat("GEL", "Georgian Lari"),
    fiat("AMD", "Armenian Dram"),
    fiat("AZN", "Azerbaijani Manat"),
    fiat("KGS", "Kyrgyzstani Som"),
    fiat("TJS", "Tajikistani Somoni"),
    fiat("TMT", "Turkmenistan Manat"),
    fiat("UZS", "Uzbekistani Som"),
    fiat("KRW", "South Korean Won"),
    fiat("HKD", "Hong Kong Dollar"),
    fiat("SGD", "Singapore Dollar"),
    fiat("THB", "Thai Baht"),
    fiat("MYR", "Malaysian Ringgit"),
    fiat("IDR", "Indonesian Rupiah"),
    fiat("PHP", "Philippine Peso"),
    fiat("VND", "Vietnamese Dong"),
    fiat("INR", "Indian Rupee"),
    fiat("PKR", "Pakistani Rupee"),
    fiat("BDT", "Bangladeshi Taka"),
    fiat("LKR", "Sri Lankan Rupee"),
    fiat("NPR", "Nepalese Rupee"),
    fiat("BTN", "Bhutanese Ngultrum"),
    fiat("MNT", "Mongolian Tugrik"),
    fiat("AED", "UAE Dirham"),
    fiat("SAR", "Saudi Riyal"),
    fiat("QAR", "Qatari Riyal"),
    fiat("KWD", "Kuwaiti Dinar"),
    fiat("BHD", "Bahraini Dinar"),
    fiat("OMR", "Omani Rial"),
    fiat("JOD", "Jordanian Dinar"),
    fiat("ILS", "Israeli Shekel"),
    fiat("TRY", "Turkish Lira"),
    fiat("EGP", "Egyptian Pound"),
    fiat("ZAR", "South African Rand"),
    fiat("NGN", "Nigerian Naira"),
    fiat("KES", "Kenyan Shilling"),
    fiat("GHS", "Ghanaian Cedi"),
    fiat("MAD", "Moroccan Dirham"),
    fiat("TND", "Tunisian Dinar"),
    fiat("DZD", "Algerian Dinar"),
    fiat("LYD", "Libyan Dinar"),
    fiat("PLN", "Polish Zloty"),
    fiat("CZK", "Czech Koruna"),
    fiat("HUF", "Hungarian Forint"),
    fiat("RON", "Romanian Leu"),
    fiat("BGN", "Bulgarian Lev"),
    fiat("HRK", "Croatian Kuna"),
    fiat("RSD", "Serbian Dinar"),
    fiat("BAM", "Bosnia-Herzegovina Convertible Mark"),
    fiat("MKD", "Macedonian Denar"),
    fiat("ALL", "Albanian Lek"),
    fiat("MDL", "Moldovan Leu"),
    fiat("ISK", "Icelandic Krona"),
    fiat("BRL", "Brazilian Real"),
    fiat("MXN", "Mexican Peso"),
    fiat("ARS", "Argentine Peso"),
    fiat("CLP", "Chilean Peso"),
    fiat("COP", "Colombian Peso"),
    fiat("PEN", "Peruvian Sol"),
    fiat("UYU", "Uruguayan Peso"),
    fiat("PYG", "Paraguayan Guarani"),
    fiat("BOB", "Bolivian Boliviano"),
    fiat("VES", "Venezuelan Bolívar"),
    fiat("IRR", "Iranian Rial"),
    fiat("IQD", "Iraqi Dinar"),
    fiat("AFN", "Afghan Afghani"),
    fiat("SYP", "Syrian Pound"),
    fiat("LBP", "Lebanese Pound"),
    fiat("YER", "Yemeni Rial"),
    fiat("JMD", "Jamaican Dollar"),
    fiat("BBD", "Barbadian Dollar"),
    fiat("BSD", "Bahamian Dollar"),
    fiat("XCD", "East Caribbean Dollar"),
    fiat("TTD", "Trinidad and Tobago Dollar"),
    fiat("FJD", "Fijian Dollar"),
    fiat("TOP", "Tongan Paʻanga"),
    fiat("WST", "Samoan Tala"),
    fiat("VUV", "Vanuatu Vatu"),
    fiat("PGK", "Papua New Guinean Kina"),
    fiat("ETB", "Ethiopian Birr"),
    fiat("UGX", "Ugandan Shilling"),
    fiat("TZS", "Tanzanian Shilling"),
    fiat("RWF", "Rwandan Franc"),
    fiat("BIF", "Burundian Franc"),
    fiat("DJF", "Djiboutian Franc"),
    fiat("SOS", "Somali Shilling"),
    fiat("ERN", "Eritrean Nakfa"),
    fiat("SDG", "Sudanese Pound"),
    fiat("SSP", "South Sudanese Pound"),
    fiat("CDF", "Congolese Franc"),
    fiat("XAF", "Central African CFA Franc"),
    fiat("XOF", "West African CFA Franc"),
    fiat("KMF", "Comorian Franc"),
    fiat("SCR", "Seychellois Rupee"),
    fiat("MUR", "Mauritian Rupee"),
    fiat("MGA", "Malagasy Ariary"),
    fiat("MZN", "Mozambican Metical"),
    fiat("ZMW", "Zambian Kwacha"),
    fiat("BWP", "Botswanan Pula"),
    fiat("NAD", "Namibian Dollar"),
    fiat("SZL", "Swazi Lilangeni"),
    fiat("LSL", "Lesotho Loti"),
)

CRYPTO_CURRENCIES: tuple[Currency, ...] = (
    crypto("BTC", "Bitcoin"),
    crypto("ETH", "Ethereum"),
    crypto("BNB", "BNB"),
    crypto("XRP", "XRP"),
    crypto("ADA", "Cardano"),
    crypto("DOGE", "Dogecoin"),
    crypto("SOL", "Solana"),
    crypto("DOT", "Polkadot"),
    crypto("MATIC", "Polygon"),
    crypto("LTC", "Litecoin"),
    crypto("AVAX", "Avalanche"),
    crypto("LINK", "Chainlink"),
    crypto("UNI", "Uniswap"),
    crypto("ATOM", "Cosmos"),
    crypto("ICP", "Internet Computer"),
    crypto("BCH", "Bitcoin Cash"),
    crypto("XLM", "Stellar"),
    crypto("VET", "VeChain"),
    crypto("FIL", "Filecoin"),
    crypto("TRX", "TRON"),
    crypto("ETC", "Ethereum Classic"),
    crypto("XMR", "Monero"),
    crypto("ALGO", "Algorand"),
    crypto("HBAR", "Hedera"),
    crypto("NEAR", "NEAR Protocol"),
)

_BY_CODE: dict[str, Currency] = {currency.code: currency for currency in (*FIAT_CURRENCIES, *CRYPTO_CURRENCIES)}


def all_currencies() -> list[Currency]:
    return [*FIAT_CURRENCIES, *CRYPTO_CURRENCIES]


def currencies_for(currency_class: CurrencyClass) -> list[Currency]:
    pool = FIAT_CURRENCIES if currency_class == CurrencyClass.FIAT else CRYPTO_CURRENCIES
    return sorted(pool, key=lambda currency: currency.code)


def find_currency(code: str) -> Currency | None:
    return _BY_CODE.get(code.strip().upper())


def search_currencies(query: str, currency_class: CurrencyClass | None = None) -> list[Currency]:
    """Case-insensitive substring match on code or name.

    Without a class filter the catalog order is kept (fiat first); with one the
    result is sorted by code. An empty query returns the whole pool.
    """
    pool = all_currencies() if currency_class is None else currencies_for(currency_class)
    needle = query.strip().lower()
    if not needle:
        return pool
    return [currency for currency in pool if needle in currency.code.lower() or needle in currency.name.lower()]


__all__ = [
    "CRYPTO_CURRENCIES",
    "FIAT_CURRENCIES",
    "all_currencies",
    "currencies_for",
    "find_currency",
    "search_currencies",
]
