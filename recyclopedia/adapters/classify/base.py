from recyclopedia.orchestrator.contracts import ClassificationResult


class Classifier:
    def classify(self, image_data_url: str) -> ClassificationResult | None:
        """Return a result, or None when no single clear item was detected.

        Raises ClassificationError for every other failure.
        """
        raise NotImplementedError
