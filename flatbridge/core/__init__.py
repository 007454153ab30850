"""Transfer orchestration for flatbridge."""
