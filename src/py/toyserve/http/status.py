# Only these statuses are ever produced.
HTTP_STATUS: dict[int, str] = {
	200: "OK",
	400: "Bad Request",
	404: "Not Found",
}

# EOF
