"""서비스 패키지 (비즈니스 로직 계층).

Service package, the business logic layer.
Contains all service classes that orchestrate business rules. Services only
flush; the calling router commits once per request.
"""
