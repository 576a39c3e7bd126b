from drf_spectacular.extensions import OpenApiAuthenticationExtension


class BearerSessionAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "clinic_core.iam.auth.BearerSessionAuthentication"
    name = "BearerJWT"
    # outranks drf-spectacular's own JWTAuthentication extension
    priority = 1

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Send the access token from /auth/login/ as `Authorization: Bearer <token>`.",
        }
