"""Customer-facing messages produced by the kiosk core.

Only the strings the core itself decides to surface live here (errors and
notices). Screen copy belongs to the renderer.
"""

from checkin_kiosk.models.session import Language

_MESSAGES: dict[Language, dict[str, str]] = {
    Language.EN: {
        "selectLanguage": "Please select your language to continue.",
        "pastDueBlocked": "Please see the attendant to settle your balance before continuing.",
        "paymentIssueSeeAttendant": "Payment issue - please see attendant",
        "rentalNotAvailable": "Unavailable",
        "error.noActiveSession": "No active session. Please wait for staff to start a session.",
        "error.processSelection": "Failed to process selection. Please try again.",
        "error.process": "Failed to process. Please try again.",
        "error.rentalNotAvailable": "This rental type is not available. Please select an available option.",
        "error.signAgreement": "Failed to sign agreement. Please try again.",
        "error.setLanguage": "Failed to set language. Please try again.",
        "error.confirmSelection": "Failed to confirm selection. Please try again.",
        "error.signatureRequired": "Please sign the agreement to continue.",
        "error.loadAgreement": "Failed to load agreement. Please try again.",
        "agreementTitle": "Club Agreement",
        "rental.LOCKER": "Locker",
        "rental.GYM_LOCKER": "Gym Locker",
        "rental.STANDARD": "Private Dressing Room",
        "rental.DOUBLE": "Deluxe Dressing Room",
        "rental.SPECIAL": "Special Dressing Room",
        "availability.onlyAvailable": "Only {count} available",
        "membership.oneTime": "One-time membership",
        "membership.sixMonth": "6-month membership",
        "selection.proposedByStaff": "Staff suggestion",
        "selection.selected": "Selected",
        "payment.totalDue": "Total due",
    },
    Language.ES: {
        "selectLanguage": "Seleccione su idioma para continuar.",
        "pastDueBlocked": "Por favor ve con el empleado para pagar tu saldo antes de continuar.",
        "paymentIssueSeeAttendant": "Problema con el pago - ve con el empleado",
        "rentalNotAvailable": "No disponible",
        "error.noActiveSession": "No hay una sesion activa. Espera a que el personal inicie una sesion.",
        "error.processSelection": "No se pudo procesar la seleccion. Intenta de nuevo.",
        "error.process": "No se pudo procesar. Intenta de nuevo.",
        "error.rentalNotAvailable": "Este tipo de renta no esta disponible. Selecciona una opcion disponible.",
        "error.signAgreement": "No se pudo firmar el acuerdo. Intenta de nuevo.",
        "error.setLanguage": "No se pudo establecer el idioma. Intenta de nuevo.",
        "error.confirmSelection": "No se pudo confirmar la seleccion. Intenta de nuevo.",
        "error.signatureRequired": "Firma el acuerdo para continuar.",
        "error.loadAgreement": "No se pudo cargar el acuerdo. Intenta de nuevo.",
        "agreementTitle": "Acuerdo del Club",
        "rental.LOCKER": "Casillero",
        "rental.GYM_LOCKER": "Casillero de gimnasio",
        "rental.STANDARD": "Vestidor privado",
        "rental.DOUBLE": "Vestidor de lujo",
        "rental.SPECIAL": "Vestidor especial",
        "availability.onlyAvailable": "Solo quedan {count}",
        "membership.oneTime": "Membresia de una vez",
        "membership.sixMonth": "Membresia de 6 meses",
        "selection.proposedByStaff": "Sugerencia del personal",
        "selection.selected": "Seleccionado",
        "payment.totalDue": "Total a pagar",
    },
}


def t(language: Language | str | None, key: str) -> str:
    """Translate a message key, falling back to English and then to the key."""
    try:
        lang = Language(language) if language else Language.EN
    except ValueError:
        lang = Language.EN
    return _MESSAGES[lang].get(key) or _MESSAGES[Language.EN].get(key, key)
