# ABOUTME: Core circulation logic package.
# ABOUTME: Holds the checkout coordinator, status enums, and the invariant verifier.
