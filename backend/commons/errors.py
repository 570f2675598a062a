"""
Error Key Catalog
=================
Stable identifiers for error messages shared by every service.

Each member's value is the translation key looked up by the presentation
layer (frontend or template catalog). Nothing here resolves text.
"""

from enum import Enum


class ErrorKey(str, Enum):
    VALIDATION = 'errors.validation'
    LINK = 'errors.link'
    MAX_USAGE = 'errors.max-usage'
    RECAPTCHA = 'errors.recaptcha'
    NO_SHOW_DATE = 'errors.noShowDateError'
    NO_SHOW = 'errors.noShowError'
    UNAUTHORIZED = 'errors.unauthorized'
    NO_FILE = 'errors.nofile'
    ALREADY_PAYED = 'errors.already-payed'
    WRONG_FILE_TYPE = 'errors.wrong-file-type'
    FILE_TOO_BIG = 'errors.max-file-size'
    ALREADY_CANCELLED = 'errors.already-cancelled'
    ALREADY_HC_USED = 'errors.already-used'
    USER_ROLE_ALREADY_EXIST = 'errors.user-role-exist'
    CODE_NOT_SENT = 'errors.send-code-error'
    WRONG_PASSWORD = 'errors.wrongpassword'
    WRONG_2FA = 'errors.wrong2fa'
    ASSIGN_BOUGHT_TO_HCP = 'errors.assign-chp'
    LINK_PACKAGE_TO_HCP = 'errors.link-hcpackage'
    ASSIGN_BOUGHT_TO_PATIENT = 'errors.assign-patient'
    NOT_READY = 'errors.not-ready'
    NOT_WAITING = 'errors.not-waiting'
    NOT_IN_USE = 'errors.not-inuse'
    FINAL_INVOICE_NOT_FUND = 'errors.final-invoice-fund'
    FINAL_INVOICE_ARE_MULTIPLE = 'errors.final-invoice-are-multiple'
    FINAL_INVOICE_AMOUNT = 'errors.final-amount-missing'
    FINAL_INVOICE_BUDGET = 'errors.final-amount-budget'
    NO_HEALTH_CREDIT = 'errors.healt-credit-small'
    FORBIDDEN = 'errors.forbidden'
    ONLY_ONE_ROLE = 'errors.one-role'
    ONE_ROLE_REST = 'errors.one-role-rest'
    NOT_FOUND = 'errors.not-found'
    BLOCKED = 'errors.blocked'
    WAIT = 'errors.wait'
    MAX_FILE_SIZE_PER_DAY_WAIT = 'errors.max-file-size-per-day-wait'
    CONTACT_ALREADY_EXIST = 'errors.contact-already-exist'
    PACKAGE_ALREADY_ASSIGNED = 'errors.package-already-assigned'
    PHONE_ALREADY_EXIST = 'errors.phone-already-exist'
    EMAIL_ALREADY_EXIST = 'errors.email-already-exist'
    SEND_CREATE_ACCOUNT_INVITATION = 'errors.send-create-account-invitation'
    INFLUENCER_CODE_USED = 'errors.influencer-code'
    CODE_ALREADY_USED = 'errors.code-already-use'
    CODE_NOT_FOUND = 'errors.code-not-found'
    CANNOT_DELETE_PROFILE = 'errors.delete-profile'
    MIN_RECOMMANDATION_AMOUNT = 'errors.min-recommandation-amount'
    COUNTRY_ALREADY_EXIST = 'errors.country-already-exist'
    WRONG_API_KEY = 'errors.wrong-api-key'
    MEMBER_ALREADY_EXIST = 'errors.member-already-exist'
    MEMBER_ROLE_EXIST = 'errors.member-role-exist'
    INVALID_INVOICE = 'errors.not-valid-invoice'
    GOOGLE_ADMIN_AUTH = 'errors.error-google-admin-auth'
    INVALID_GOOGLE_ACCOUNT = 'errors.invalid-google-account'
    # key spelling is shared with the frontend catalog
    WRONG_PATIENT_CODE = 'errors.worng-patient-code'

    def __str__(self):
        return self.value

    def as_payload(self) -> dict:
        """Response body used by the API views."""
        return {'error': self.value}
