class GlobalMessages:
    # Auth Messages
    INVALID_CREDENTIALS = "Invalid credentials"
    AUTHENTICATION_REQUIRED = "Authentication required"
    SESSION_EXPIRED = "Session expired"
    LOGOUT_SUCCESS = "Logged out successfully"
    USERNAME_EXISTS = "Username already exists"
    EMAIL_EXISTS = "Email already exists"
    INVALID_ROLE = "Invalid role"

    # User Messages
    USER_NOT_FOUND = "User not found"

    # Access Messages
    ACCESS_DENIED = "Access denied"

    # Patient Messages
    PATIENT_NOT_FOUND = "Patient not found"
    CLINIC_REQUIRED = "clinic_id is required when a consultant creates a patient"

    # Consultant Messages
    CONSULTANT_NOT_FOUND = "Consultant not found"
    CONSULTANT_EXISTS = "Consultant already exists for this clinic"
    CONSULTANT_CLINIC_MISMATCH = "Consultant does not belong to this clinic"

    # Treatment Plan Messages
    TREATMENT_PLAN_NOT_FOUND = "Treatment plan not found"
    TREATMENT_PLAN_PATIENT_MISMATCH = "Treatment plan does not belong to this patient"

    # Image Messages
    IMAGE_NOT_FOUND = "Image not found"
    NO_FILE_UPLOADED = "No file uploaded"
    FILE_TYPE_NOT_ALLOWED = "Only image and medical files are allowed"
    FILE_TOO_LARGE = "File exceeds the maximum upload size"
